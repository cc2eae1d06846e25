import pytest

from apps.resources.classify import classify


@pytest.mark.parametrize('mime_type, expected', [
    ('image/png', 'image'),
    ('video/mp4', 'video'),
    ('audio/mpeg', 'audio'),
    ('application/pdf', 'document'),
    ('text/plain', 'document'),
    ('application/vnd.openxmlformats-officedocument.wordprocessingml.document', 'document'),
    ('application/vnd.ms-excel', 'document'),
    ('application/zip', 'archive'),
    ('application/x-7z-compressed', 'archive'),
    ('application/gzip', 'archive'),
    ('application/x-tar', 'archive'),
    ('application/json', 'other'),
    ('APPLICATION/PDF', 'document'),
    ('', 'unknown'),
    (None, 'unknown'),
    ('   ', 'unknown'),
])
def test_classify(mime_type, expected):
    assert classify(mime_type) == expected
