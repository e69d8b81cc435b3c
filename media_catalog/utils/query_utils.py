import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..schemas.records_schemas import RecordQuery

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ('title', 'director', 'genre')
SORTABLE_FIELDS = frozenset({
    'title', 'type', 'director', 'budget', 'location', 'duration', 'year',
    'genre', 'rating', 'description', 'poster', 'createdAt', 'updatedAt',
})

SortSpec = List[Tuple[str, bool]]


@dataclass(frozen=True)
class RecordFilter:
    """
    Owner-scoped predicate over stored record documents.

    A non-empty ``search`` matches when it appears, ignoring case, in any
    of the title, director or genre fields. ``type`` must match exactly and
    is combined with the search term.
    """
    owner: str
    search: str = ''
    type: Optional[str] = None

    def matches(self, document: Dict[str, Any]) -> bool:
        if document.get('owner') != self.owner:
            return False
        if self.type and document.get('type') != self.type:
            return False
        if self.search:
            pattern = re.compile(re.escape(self.search), re.IGNORECASE)
            return any(
                pattern.search(str(document.get(f) or ''))
                for f in SEARCH_FIELDS
            )
        return True


def parse_positive_int(value: Any, default: int) -> int:
    """
    Read a page or limit query value.

    Absent, non-numeric and zero values give ``default``; negative values are
    clamped to 1.
    """
    if value is None:
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        return default
    if number == 0:
        return default
    return max(number, 1)


def parse_list_query(
    page: Any = None,
    limit: Any = None,
    search: Optional[str] = None,
    record_type: Optional[str] = None,
    sort_by: Optional[str] = None,
    default_limit: int = 10,
    max_limit: int = 100,
    default_sort: str = '-createdAt'
) -> RecordQuery:
    """
    Normalise raw list parameters into a RecordQuery.

    :param page: requested page number, 1-based
    :param limit: requested page size, clamped to ``max_limit``
    :param search: free text matched against title, director and genre
    :param record_type: exact type filter, empty for no filter
    :param sort_by: sort string such as '-createdAt' or 'type -year'
    :return: RecordQuery with defaults applied
    """
    return RecordQuery(
        page=parse_positive_int(page, 1),
        limit=min(parse_positive_int(limit, default_limit), max_limit),
        search=(search or '').strip(),
        type=(record_type or '').strip() or None,
        sort_by=(sort_by or '').strip() or default_sort,
    )


def build_filter(owner_id: str, query: RecordQuery) -> RecordFilter:
    return RecordFilter(owner=owner_id, search=query.search, type=query.type)


def parse_sort_spec(sort_by: str, default_sort: str = '-createdAt') -> SortSpec:
    """
    Turn a sort string into (field, descending) pairs.

    Keys are separated by spaces or commas; a leading '-' means descending
    and a leading '+' is accepted for ascending. Unknown fields are skipped.
    """
    order: SortSpec = []
    for token in re.split(r'[\s,]+', sort_by or ''):
        if not token:
            continue
        descending = token.startswith('-')
        name = token.lstrip('+-')
        if name not in SORTABLE_FIELDS:
            logger.warning("Ignoring unknown sort field %r", name)
            continue
        order.append((name, descending))
    if not order and sort_by != default_sort:
        return parse_sort_spec(default_sort, default_sort)
    return order


def sort_documents(
    documents: Iterable[Dict[str, Any]],
    order: SortSpec
) -> List[Dict[str, Any]]:
    """
    Sort documents by every (field, descending) pair, first pair first.

    Missing values come first in ascending order and last in descending
    order. Documents that tie keep creation order.
    """
    ordered = sorted(
        documents,
        key=lambda d: (d.get('createdAt') is not None, d.get('createdAt') or 0, d.get('id', ''))
    )
    for name, descending in reversed(order):
        ordered.sort(
            key=lambda d: (d.get(name) is not None, d.get(name) if d.get(name) is not None else 0),
            reverse=descending,
        )
    return ordered


def select_page(
    documents: Iterable[Dict[str, Any]],
    record_filter: RecordFilter,
    order: SortSpec,
    skip: int,
    limit: int
) -> List[Dict[str, Any]]:
    matched = [d for d in documents if record_filter.matches(d)]
    return sort_documents(matched, order)[skip:skip + limit]


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
