from typing import Optional

CATEGORIES = ('document', 'image', 'video', 'audio', 'archive', 'other', 'unknown')

_PREFIX_RULES = (
    ('image/', 'image'),
    ('video/', 'video'),
    ('audio/', 'audio'),
)

# archive rules run before document rules
_SUBSTRING_RULES = (
    (('zip', 'rar', '7z', 'tar', 'gz'), 'archive'),
    (('pdf', 'doc', 'text', 'word', 'spreadsheet', 'excel', 'powerpoint', 'presentation'), 'document'),
)


def classify(mime_type: Optional[str]) -> str:
    """Map a client-supplied MIME type to one of CATEGORIES."""
    if not mime_type or not mime_type.strip():
        return 'unknown'
    value = mime_type.strip().lower()
    for prefix, category in _PREFIX_RULES:
        if value.startswith(prefix):
            return category
    for needles, category in _SUBSTRING_RULES:
        if any(needle in value for needle in needles):
            return category
    return 'other'
