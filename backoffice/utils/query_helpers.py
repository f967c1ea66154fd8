"""Query helpers shared by the listing services."""
from typing import Dict, Iterable, Optional
from sqlalchemy import or_, func


LIKE_ESCAPE = '\\'


def escape_like(text: str) -> str:
    """Make % and _ in user input match literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace('%', LIKE_ESCAPE + '%')
        .replace('_', LIKE_ESCAPE + '_')
    )


def apply_search(query, columns: Iterable, search: Optional[str]):
    """Case-insensitive substring match over several columns (OR-ed)."""
    search = (search or '').strip()
    if not search:
        return query
    pattern = f'%{escape_like(search.lower())}%'
    return query.filter(or_(*[func.lower(column).like(pattern, escape=LIKE_ESCAPE) for column in columns]))


def apply_sort(query, sort: Optional[str], direction: Optional[str], allowed: Dict[str, object], default: str):
    """
    Order a query by a whitelisted column.

    Unknown sort keys fall back to `default`; direction is 'asc' unless
    'desc' is given explicitly.
    """
    column = allowed.get(sort or default, allowed[default])
    if (direction or '').lower() == 'desc':
        return query.order_by(column.desc())
    return query.order_by(column.asc())


def parse_ternary(value) -> Optional[bool]:
    """
    Ternary filter value: '1'/'true'/'yes' -> True, '0'/'false'/'no' -> False,
    anything else (including blank) -> None meaning "don't filter".
    """
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if normalized in ('1', 'true', 'yes', 'on'):
        return True
    if normalized in ('0', 'false', 'no', 'off'):
        return False
    return None
