import base64
import os

import pytest

from apps.resources.codec import CHUNK_SIZE, DECODE_CHUNK_SIZE, CodecError, SizeMismatchError, decode, encode


@pytest.mark.parametrize('size', [
    0, 1, 2, 3,
    CHUNK_SIZE - 1, CHUNK_SIZE, CHUNK_SIZE + 1,
    2 * CHUNK_SIZE + 1,
    DECODE_CHUNK_SIZE + 1,
])
def test_roundtrip_across_chunk_boundaries(size):
    raw = os.urandom(size)
    text = encode(raw)
    assert text == base64.b64encode(raw).decode('ascii')
    assert decode(text, expected_size=size) == raw


def test_chunk_size_does_not_change_output():
    raw = bytes(range(256)) * 50
    assert encode(raw, chunk_size=3) == encode(raw) == encode(raw, chunk_size=3 * 1000)
    text = encode(raw)
    assert decode(text, chunk_size=4) == decode(text) == raw


@pytest.mark.parametrize('text', [
    'not base64!',
    'abc',          # length not a multiple of 4
    'QQ==QQ==',     # padding in the middle
    'A===',
    'QUJD\n',
])
def test_decode_rejects_malformed_text(text):
    with pytest.raises(CodecError):
        decode(text)


def test_decode_rejects_non_string():
    with pytest.raises(CodecError):
        decode(b'QUJD')


def test_decode_size_mismatch():
    text = encode(b'0123456789')
    with pytest.raises(SizeMismatchError):
        decode(text, expected_size=9)


def test_invalid_chunk_sizes():
    with pytest.raises(ValueError):
        encode(b'abc', chunk_size=4)
    with pytest.raises(ValueError):
        decode('QUJD', chunk_size=3)
