import os

from dotenv import load_dotenv

load_dotenv()

# hosted backend (auth + key-value table)
SUPABASE_URL = os.getenv('SUPABASE_URL', '').rstrip('/')
SUPABASE_ANON_KEY = os.getenv('SUPABASE_ANON_KEY', '')
SUPABASE_SERVICE_ROLE_KEY = os.getenv('SUPABASE_SERVICE_ROLE_KEY', '')

# key-value store
KV_BACKEND = os.getenv('KV_BACKEND', 'db')
KV_TABLE = os.getenv('KV_TABLE', 'kv_store')
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite://db.sqlite3')

MAX_FILE_SIZE = int(os.getenv('MAX_FILE_SIZE', 5 * 1024 * 1024))

API_PREFIX = os.getenv('API_PREFIX', '').rstrip('/')
CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()]
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
