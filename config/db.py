from typing import Optional

from tortoise import Tortoise, connections

from config.settings import DATABASE_URL

MODEL_MODULES = ['apps.kvstore.models']


async def init_db(db_url: Optional[str] = None) -> None:
    await Tortoise.init(db_url=db_url or DATABASE_URL, modules={'models': MODEL_MODULES})
    await Tortoise.generate_schemas(safe=True)


async def close_db() -> None:
    await connections.close_all()
