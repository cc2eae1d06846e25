import logging
from typing import Optional, Protocol

import httpx
from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from config.settings import KV_BACKEND, KV_TABLE, SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY
from apps.kvstore.models import KVEntry
from utils.errors import StorageError

logger = logging.getLogger(__name__)


class KVStoreInterface(Protocol):
    async def get(self, key: str) -> Optional[dict]:
        ...

    async def set(self, key: str, value: dict) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def get_by_prefix(self, prefix: str) -> list[dict]:
        ...


class DBKVStore:
    """Key-value entries in a database table (KVEntry)."""

    async def get(self, key: str) -> Optional[dict]:
        try:
            row = await KVEntry.filter(key=key).first()
        except BaseORMException as e:
            raise StorageError(f'Failed to read {key}: {e}') from e
        if not row:
            return None
        return row.value

    async def set(self, key: str, value: dict) -> None:
        try:
            # upsert
            async with in_transaction():
                existing = await KVEntry.filter(key=key).first()
                if existing:
                    existing.value = value
                    await existing.save()
                else:
                    await KVEntry.create(key=key, value=value)
        except BaseORMException as e:
            raise StorageError(f'Failed to write {key}: {e}') from e

    async def delete(self, key: str) -> None:
        try:
            await KVEntry.filter(key=key).delete()
        except BaseORMException as e:
            raise StorageError(f'Failed to delete {key}: {e}') from e

    async def get_by_prefix(self, prefix: str) -> list[dict]:
        try:
            rows = await KVEntry.filter(key__startswith=prefix)
        except BaseORMException as e:
            raise StorageError(f'Failed to scan {prefix}: {e}') from e
        return [row.value for row in rows]


class RestKVStore:
    """Key-value table exposed by the hosted backend's REST interface."""

    def __init__(self, base_url: str, table: str, service_key: str):
        self.base_url = base_url.rstrip('/')
        self.table = table
        self.service_key = service_key

    @property
    def url(self) -> str:
        return f'{self.base_url}/rest/v1/{self.table}'

    def _headers(self, extra: Optional[dict] = None) -> dict:
        headers = {
            'apikey': self.service_key,
            'Authorization': f'Bearer {self.service_key}',
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(self, method: str, action: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.request(method, self.url, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f'KV {action} failed: {e}') from e
        if resp.status_code not in (200, 201, 204):
            raise StorageError(f'KV {action} failed: {resp.status_code} {resp.text}')
        return resp

    async def get(self, key: str) -> Optional[dict]:
        resp = await self._request(
            'GET', 'get',
            params={'key': f'eq.{key}', 'select': 'value'},
            headers=self._headers(),
        )
        rows = resp.json()
        if not rows:
            return None
        return rows[0]['value']

    async def set(self, key: str, value: dict) -> None:
        await self._request(
            'POST', 'set',
            json={'key': key, 'value': value},
            headers=self._headers({'Prefer': 'resolution=merge-duplicates'}),
        )

    async def delete(self, key: str) -> None:
        await self._request(
            'DELETE', 'delete',
            params={'key': f'eq.{key}'},
            headers=self._headers(),
        )

    async def get_by_prefix(self, prefix: str) -> list[dict]:
        resp = await self._request(
            'GET', 'scan',
            params={'key': f'like.{prefix}*', 'select': 'key,value'},
            headers=self._headers(),
        )
        return [row['value'] for row in resp.json()]


def pick_store() -> KVStoreInterface:
    """Pick the key-value backend from KV_BACKEND ('db' or 'rest')."""
    backend = KV_BACKEND.lower()
    if backend == 'rest':
        return RestKVStore(base_url=SUPABASE_URL, table=KV_TABLE, service_key=SUPABASE_SERVICE_ROLE_KEY)
    if backend != 'db':
        logger.warning('Unknown KV_BACKEND %r, falling back to db', KV_BACKEND)
    return DBKVStore()
