"""
Slug service - derives URL-safe identifiers from display names.

A slug is derived exactly once, when a record is created. Edits never
recompute it, so published URLs stay stable after a rename.
"""

import enum
import re
import unicodedata
from typing import Optional

_AT_SIGN = re.compile(r'@')
_DISALLOWED = re.compile(r'[^a-z0-9\s-]+')
_SEPARATOR_RUNS = re.compile(r'[\s-]+')


class Operation(enum.Enum):
    """Form operation in which a field change happens."""
    CREATE = 'create'
    UPDATE = 'update'

    @classmethod
    def parse(cls, value) -> 'Operation':
        """
        Map the operation names used by the form layer onto the enum.

        'create' -> CREATE; 'edit', 'update' -> UPDATE. Anything unknown is
        treated as UPDATE so an unexpected caller can never rewrite a slug.
        """
        if isinstance(value, cls):
            return value
        if str(value or '').strip().lower() == 'create':
            return cls.CREATE
        return cls.UPDATE


def slugify(name: Optional[str]) -> str:
    """
    Build a lowercase, hyphen-separated slug from a display name.

    Examples:
        slugify("Men's Running Shoes!!") -> "mens-running-shoes"
        slugify("  Café  Olé ") -> "cafe-ole"
        slugify("") -> ""
    """
    if not name:
        return ''

    slug = unicodedata.normalize('NFKD', name)
    slug = slug.encode('ascii', 'ignore').decode('ascii')

    slug = slug.replace('_', '-')
    slug = _AT_SIGN.sub('-at-', slug)
    slug = slug.lower()

    # Punctuation is dropped outright ("men's" -> "mens"), separators collapse
    slug = _DISALLOWED.sub('', slug)
    slug = _SEPARATOR_RUNS.sub('-', slug)

    return slug.strip('-')


def derive_slug(operation, name: Optional[str]) -> Optional[str]:
    """
    Slug value to write after the name field is committed (blur/submit).

    Returns None on update: the slug is frozen after creation and the
    caller must leave the field untouched.
    """
    if Operation.parse(operation) is not Operation.CREATE:
        return None
    return slugify(name)
