"""
Filter, search and sort pipeline over the in-memory program records.

All functions take a list of record dicts and return a new list; the input is
never mutated. The web layer composes them through ``run_query``.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from catalog import locale_key
from settings import DISPLAY_LIMIT, SEARCHABLE_FIELDS, SORT_DIRECTIONS, SORT_FIELDS

logger = logging.getLogger(__name__)


class InvalidSortField(ValueError):
    pass


class InvalidSortDirection(ValueError):
    pass


class InvalidFilterValue(ValueError):
    pass


def text_value(values, key):
    """Stripped string at ``key``; missing or null gives ''."""
    value = values.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise InvalidFilterValue(f"'{key}' must be a string, got {type(value).__name__}")
    return value.strip()


def _is_sort_field(value):
    return isinstance(value, str) and value in SORT_FIELDS


@dataclass
class FilterCriteria:
    university: str = ''
    course: str = ''
    category: str = ''
    stream: str = ''

    @classmethod
    def from_mapping(cls, values):
        return cls(
            university=text_value(values, 'university'),
            course=text_value(values, 'course'),
            category=text_value(values, 'category'),
            stream=text_value(values, 'stream'),
        )


@dataclass
class SortState:
    field: Optional[str] = None
    direction: str = 'asc'

    def __post_init__(self):
        if self.field is not None and not _is_sort_field(self.field):
            raise InvalidSortField(f"Unknown sort field: {self.field!r}")
        if not isinstance(self.direction, str) or self.direction not in SORT_DIRECTIONS:
            raise InvalidSortDirection(f"Unknown sort direction: {self.direction!r}")

    def toggle(self, field):
        """Flip direction on the active column, otherwise switch to it ascending."""
        if not _is_sort_field(field):
            raise InvalidSortField(f"Unknown sort field: {field!r}")
        if self.field == field:
            self.direction = 'desc' if self.direction == 'asc' else 'asc'
        else:
            self.field = field
            self.direction = 'asc'
        return self

    def to_dict(self):
        return {'field': self.field, 'direction': self.direction}


@dataclass
class QueryResult:
    rows: List[dict]
    total: int
    truncated: bool
    sort: SortState = field(default_factory=SortState)


def stream_matches(stream_12th, selected):
    # A missing stream is displayed as "Any", so it matches like one
    if not selected:
        return True
    stream = (stream_12th or 'any').lower()
    if 'any' in stream:
        return True
    if selected == 'Any':
        return False
    return selected.lower() in stream


def perform_search(courses, criteria):
    """Records matching every non-empty field of ``criteria``."""
    results = list(courses)

    if criteria.university:
        results = [c for c in results if c.get('university_name') == criteria.university]

    if criteria.course:
        results = [c for c in results if c.get('standard_course_name') == criteria.course]

    if criteria.category:
        results = [c for c in results if c.get('course_category') == criteria.category]

    if criteria.stream:
        results = [c for c in results if stream_matches(c.get('stream_12th'), criteria.stream)]

    logger.debug(f"perform_search {criteria} -> {len(results)} of {len(courses)}")
    return results


def filter_table_results(results, term):
    term = (term or '').lower().strip()
    if not term:
        return list(results)

    return [
        c for c in results
        if any(term in (c.get(f) or '').lower() for f in SEARCHABLE_FIELDS)
    ]


def sort_results(results, field, direction='asc'):
    if not _is_sort_field(field):
        raise InvalidSortField(f"Unknown sort field: {field!r}")
    if direction not in SORT_DIRECTIONS:
        raise InvalidSortDirection(f"Unknown sort direction: {direction!r}")

    key_field = SORT_FIELDS[field]
    # reverse=True keeps equal keys in their original order
    return sorted(
        results,
        key=lambda c: locale_key(c.get(key_field)),
        reverse=(direction == 'desc'),
    )


def handle_sort(results, state, field):
    state.toggle(field)
    return sort_results(results, state.field, state.direction)


def display_slice(results, limit=DISPLAY_LIMIT):
    return results[:limit], len(results) > limit


def run_query(courses, criteria, term='', sort=None, limit=DISPLAY_LIMIT):
    """Filter, sort, text-search and cap ``courses`` for display."""
    sort = sort or SortState()

    results = perform_search(courses, criteria)
    if sort.field:
        results = sort_results(results, sort.field, sort.direction)
    results = filter_table_results(results, term)

    rows, truncated = display_slice(results, limit)
    return QueryResult(rows=rows, total=len(results), truncated=truncated, sort=sort)
