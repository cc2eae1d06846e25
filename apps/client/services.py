"""Synchronous API client with an explicit session.

The session is a plain value returned by ``login``/``signup`` and passed
into every resource call; nothing is kept in ambient storage.
"""
import json
from dataclasses import dataclass, replace
from typing import Iterable, Optional

import httpx


class ClientError(Exception):
    def __init__(self, status_code: int, message: str, code: Optional[str] = None):
        super().__init__(f'{status_code}: {message}')
        self.status_code = status_code
        self.message = message
        self.code = code


@dataclass(frozen=True)
class Session:
    access_token: str
    email: Optional[str] = None
    refresh_token: Optional[str] = None

    def authorization_header(self) -> dict:
        return {'Authorization': f'Bearer {self.access_token}'}


@dataclass
class Download:
    content: bytes
    content_type: str
    filename: Optional[str]


def _filename_from(disposition: str) -> Optional[str]:
    for part in disposition.split(';'):
        key, _, value = part.strip().partition('=')
        if key == 'filename':
            return value.strip('"')
    return None


class ResourceClient:
    """Thin wrapper over an ``httpx.Client`` (FastAPI's TestClient works too)."""

    def __init__(self, http: httpx.Client, prefix: str = ''):
        self.http = http
        self.prefix = prefix.rstrip('/')

    def _url(self, path: str) -> str:
        return f'{self.prefix}{path}'

    def _check(self, resp: httpx.Response) -> httpx.Response:
        if resp.is_success:
            return resp
        try:
            body = resp.json()
        except ValueError:
            raise ClientError(resp.status_code, resp.text) from None
        if not isinstance(body, dict):
            raise ClientError(resp.status_code, resp.text)
        raise ClientError(resp.status_code, body.get('error', resp.text), body.get('code'))

    def _session_from(self, body: dict, email: Optional[str]) -> Session:
        user = body.get('user') or {}
        return Session(
            access_token=body['access_token'],
            email=user.get('email') or email,
            refresh_token=body.get('refresh_token'),
        )

    # session lifecycle

    def signup(self, email: str, password: str, name: Optional[str] = None) -> Session:
        resp = self._check(self.http.post(self._url('/signup'),
                                          json={'email': email, 'password': password, 'name': name}))
        return self._session_from(resp.json(), email)

    def login(self, email: str, password: str) -> Session:
        resp = self._check(self.http.post(self._url('/login'), json={'email': email, 'password': password}))
        return self._session_from(resp.json(), email)

    def refresh(self, session: Session) -> Session:
        if not session.refresh_token:
            raise ValueError('session has no refresh token')
        resp = self._check(self.http.post(self._url('/refresh'), json={'refresh_token': session.refresh_token}))
        body = resp.json()
        return replace(session, access_token=body['access_token'],
                       refresh_token=body.get('refresh_token') or session.refresh_token)

    def logout(self, session: Session) -> None:
        self._check(self.http.post(self._url('/logout'), headers=session.authorization_header()))

    # resources

    def upload(self, session: Session, name: str, content: bytes,
               mime_type: str = 'application/octet-stream', tags: Iterable[str] = ()) -> dict:
        resp = self._check(self.http.post(
            self._url('/upload'),
            headers=session.authorization_header(),
            files={'file': (name, content, mime_type)},
            data={'tags': json.dumps(list(tags))},
        ))
        return resp.json()['resource']

    def list_resources(self, session: Session, **filters) -> list[dict]:
        params = {k: v for k, v in filters.items() if v is not None}
        resp = self._check(self.http.get(self._url('/resources'), headers=session.authorization_header(),
                                         params=params))
        return resp.json()['resources']

    def download(self, session: Session, resource_id: str) -> Download:
        resp = self._check(self.http.get(self._url(f'/download/{resource_id}'),
                                         headers=session.authorization_header()))
        return Download(
            content=resp.content,
            content_type=resp.headers.get('content-type', ''),
            filename=_filename_from(resp.headers.get('content-disposition', '')),
        )

    def delete(self, session: Session, resource_id: str) -> None:
        self._check(self.http.delete(self._url(f'/resources/{resource_id}'),
                                     headers=session.authorization_header()))
