import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

import pydantic

from config.settings import API_PREFIX, MAX_FILE_SIZE
from apps.kvstore.services import KVStoreInterface, pick_store
from apps.resources import codec
from apps.resources.classify import CATEGORIES, classify
from apps.resources.schema import ResourceListItem, ResourceMeta
from utils.errors import DataIntegrityError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

RESOURCE_PREFIX = 'resource:'
DEFAULT_MIME_TYPE = 'application/octet-stream'

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def resource_key(resource_id: str) -> str:
    return f'{RESOURCE_PREFIX}{resource_id}'


def new_resource_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_upload_date(value) -> datetime:
    if not isinstance(value, str):
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_tags(tags_input: Optional[str]) -> list[str]:
    """Parse the JSON-encoded tags field. Bad input yields no tags instead of an error."""
    if not tags_input:
        return []
    try:
        tags = json.loads(tags_input)
    except ValueError as e:
        logger.warning('Error parsing tags %r: %s', tags_input[:100], e)
        return []
    if not isinstance(tags, list):
        logger.warning('Ignoring tags that are not a JSON array: %r', tags_input[:100])
        return []
    return normalize_tags(tags)


def normalize_tags(tags) -> list[str]:
    """Trim, lowercase, drop empties and duplicates; first occurrence keeps its position."""
    seen = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        tag = tag.strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def check_payload_size(size: int) -> None:
    if size > MAX_FILE_SIZE:
        raise ValidationError(
            f'File too large. Maximum size is {MAX_FILE_SIZE / (1024 * 1024):g}MB',
            code='payload_too_large',
        )


def to_metadata(record: dict) -> dict:
    return ResourceMeta.model_validate(record).model_dump()


def to_list_item(record: dict) -> dict:
    meta = to_metadata(record)
    return ResourceListItem(
        **meta,
        category=classify(meta['type']),
        downloadUrl=f"{API_PREFIX}/download/{meta['id']}",
    ).model_dump()


async def store_resource(payload: Optional[bytes],
                         file_name: Optional[str],
                         mime_type: Optional[str],
                         tags_input: Optional[str] = None,
                         owner: Optional[str] = None,
                         store: Optional[KVStoreInterface] = None) -> dict:
    """Encode and persist an upload; returns its metadata (no payload)."""
    if payload is None:
        raise ValidationError('No file provided', code='missing_payload')
    check_payload_size(len(payload))

    tags = parse_tags(tags_input)
    data = codec.encode(payload)
    resource = {
        'id': new_resource_id(),
        'name': file_name or '',
        'type': mime_type or '',
        'size': len(payload),
        'uploadDate': utc_now_iso(),
        'tags': tags,
        'owner': owner,
        'data': data,
    }

    logger.info('Storing resource %s: %s, size: %s, tags: %s, base64 length: %s',
                resource['id'], resource['name'], resource['size'], ', '.join(tags), len(data))
    store = store or pick_store()
    await store.set(resource_key(resource['id']), resource)
    return to_metadata(resource)


async def list_resources(q: Optional[str] = None,
                         category: Optional[str] = None,
                         tag: Optional[str] = None,
                         offset: int = 0,
                         limit: Optional[int] = None,
                         store: Optional[KVStoreInterface] = None) -> dict:
    """Metadata for every stored resource, newest first, optionally filtered and paged."""
    if category and category != 'all' and category not in CATEGORIES:
        raise ValidationError(f'Unknown type filter: {category}', code='invalid_filter')

    store = store or pick_store()
    records = await store.get_by_prefix(RESOURCE_PREFIX)
    items = []
    for record in records:
        try:
            items.append(to_list_item(record))
        except pydantic.ValidationError as e:
            record_id = record.get('id') if isinstance(record, dict) else None
            logger.error('Skipping malformed resource record %s: %s', record_id, e)
    items.sort(key=lambda item: parse_upload_date(item['uploadDate']), reverse=True)

    if q:
        needle = q.lower()
        items = [item for item in items if needle in item['name'].lower()]
    if category and category != 'all':
        items = [item for item in items if item['category'] == category]
    if tag:
        wanted = tag.strip().lower()
        items = [item for item in items if wanted in item['tags']]

    total = len(items)
    end = None if limit is None else offset + limit
    return {'resources': items[offset:end], 'total': total}


async def collect_tags(store: Optional[KVStoreInterface] = None) -> list[str]:
    store = store or pick_store()
    records = await store.get_by_prefix(RESOURCE_PREFIX)
    tags = set()
    for record in records:
        record_tags = record.get('tags') if isinstance(record, dict) else None
        if isinstance(record_tags, list):
            tags.update(normalize_tags(record_tags))
    return sorted(tags)


async def load_resource_content(resource_id: str,
                                store: Optional[KVStoreInterface] = None) -> tuple[dict, bytes]:
    """Fetch a full record and decode its payload.

    Returns the metadata projection and the exact original bytes. Raises
    DataIntegrityError rather than returning a truncated or garbled payload.
    """
    store = store or pick_store()
    resource = await store.get(resource_key(resource_id))
    if not resource:
        logger.error('Resource not found for id: %s', resource_id)
        raise NotFoundError('Resource not found')

    data = resource.get('data')
    if data is None:
        logger.error('Resource data is missing for id: %s', resource_id)
        raise DataIntegrityError('Resource data is missing', resource_id, code='data_missing')
    if not isinstance(data, str):
        logger.error('Resource data is not a string for id: %s (%s)', resource_id, type(data).__name__)
        raise DataIntegrityError('Invalid resource data format', resource_id, code='invalid_format')

    size = resource.get('size')
    if not isinstance(size, int) or isinstance(size, bool) or size < 0:
        logger.error('Resource size is invalid for id: %s (%r)', resource_id, size)
        raise DataIntegrityError('Invalid resource data format', resource_id, code='invalid_format')

    try:
        content = codec.decode(data, expected_size=size)
    except codec.SizeMismatchError as e:
        logger.error('Size mismatch for id: %s: %s', resource_id, e)
        raise DataIntegrityError(f'Stored size does not match file data for resource {resource_id}',
                                 resource_id, code='size_mismatch') from e
    except codec.CodecError as e:
        logger.error('Failed to decode data for id: %s: %s; data preview: %s', resource_id, e, data[:100])
        raise DataIntegrityError(f'Failed to decode file data for resource {resource_id}',
                                 resource_id, code='decode_failure') from e

    try:
        meta = to_metadata(resource)
    except pydantic.ValidationError as e:
        logger.error('Resource metadata is invalid for id: %s: %s', resource_id, e)
        raise DataIntegrityError('Invalid resource data format', resource_id, code='invalid_format') from e
    return meta, content


async def remove_resource(resource_id: str, store: Optional[KVStoreInterface] = None) -> None:
    store = store or pick_store()
    key = resource_key(resource_id)
    resource = await store.get(key)
    if not resource:
        raise NotFoundError('Resource not found')
    await store.delete(key)
    logger.info('Deleted resource %s', resource_id)
