from typing import Optional
from urllib.parse import quote

from fastapi import File, Form, Query, Request, UploadFile
from fastapi.responses import Response

from apps.resources.services import (
    DEFAULT_MIME_TYPE,
    check_payload_size,
    collect_tags,
    list_resources,
    load_resource_content,
    remove_resource,
    store_resource,
)
from apps.user.services import require_auth


def content_disposition(name: str, inline: bool = False) -> str:
    disposition = 'inline' if inline else 'attachment'
    try:
        name.encode('latin-1')
    except UnicodeEncodeError:
        fallback = name.encode('ascii', 'replace').decode('ascii')
        return f"{disposition}; filename=\"{fallback}\"; filename*=UTF-8''{quote(name, safe='')}"
    return f'{disposition}; filename="{name}"'


async def upload_resource(request: Request,
                          file: Optional[UploadFile] = File(None),
                          tags: Optional[str] = Form(None)):
    identity = await require_auth(request)
    payload = None
    if file is not None:
        if file.size is not None:
            check_payload_size(file.size)
        payload = await file.read()
    resource = await store_resource(
        payload,
        file_name=file.filename if file is not None else None,
        mime_type=file.content_type if file is not None else None,
        tags_input=tags,
        owner=identity.email,
    )
    return {'success': True, 'resource': resource}


async def get_resources(request: Request,
                        q: Optional[str] = None,
                        category: Optional[str] = Query(None, alias='type'),
                        tag: Optional[str] = None,
                        offset: int = Query(0, ge=0),
                        limit: Optional[int] = Query(None, ge=1)):
    await require_auth(request)
    return await list_resources(q=q, category=category, tag=tag, offset=offset, limit=limit)


async def get_tags(request: Request):
    await require_auth(request)
    return {'tags': await collect_tags()}


async def download_resource(request: Request, resource_id: str, inline: bool = False):
    await require_auth(request)
    meta, content = await load_resource_content(resource_id)
    return Response(
        content=content,
        headers={
            'Content-Type': meta['type'] or DEFAULT_MIME_TYPE,
            'Content-Disposition': content_disposition(meta['name'], inline),
            'Content-Length': str(meta['size']),
        },
    )


async def delete_resource(request: Request, resource_id: str):
    await require_auth(request)
    await remove_resource(resource_id)
    return {'success': True}
