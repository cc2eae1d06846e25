"""Base64 bridge between raw uploads and the text-only key-value store.

Payloads are encoded in fixed-size slices. The slice length is a multiple
of 3 bytes (and of 4 characters on the way back) so every slice except the
last encodes without padding and the joined output is identical to a
single-shot encode.
"""
import base64
import binascii
import re
from typing import Optional

CHUNK_SIZE = 3 * 2730  # bytes per encode slice
DECODE_CHUNK_SIZE = CHUNK_SIZE // 3 * 4  # characters per decode slice

_BASE64_RE = re.compile(r'[A-Za-z0-9+/]*={0,2}')


class CodecError(ValueError):
    """Text is not valid codec output."""


class SizeMismatchError(CodecError):
    """Text decodes cleanly but to a different length than recorded."""


def encode(data: bytes, chunk_size: int = CHUNK_SIZE) -> str:
    if chunk_size <= 0 or chunk_size % 3:
        raise ValueError('chunk_size must be a positive multiple of 3')
    view = memoryview(data)
    parts = []
    for start in range(0, len(view), chunk_size):
        parts.append(base64.b64encode(view[start:start + chunk_size]).decode('ascii'))
    return ''.join(parts)


def decode(text: str, expected_size: Optional[int] = None, chunk_size: int = DECODE_CHUNK_SIZE) -> bytes:
    if chunk_size <= 0 or chunk_size % 4:
        raise ValueError('chunk_size must be a positive multiple of 4')
    if not isinstance(text, str):
        raise CodecError(f'expected str, got {type(text).__name__}')
    if len(text) % 4 or not _BASE64_RE.fullmatch(text):
        raise CodecError('not valid base64 text')

    out = bytearray()
    try:
        for start in range(0, len(text), chunk_size):
            out += base64.b64decode(text[start:start + chunk_size], validate=True)
    except binascii.Error as e:
        raise CodecError(f'not valid base64 text: {e}') from e

    if expected_size is not None and len(out) != expected_size:
        raise SizeMismatchError(f'decoded {len(out)} bytes, expected {expected_size}')
    return bytes(out)
