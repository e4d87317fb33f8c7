import json
import logging

logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """Raised when the program dataset cannot be read or parsed."""


def locale_key(value):
    """Sort key approximating ``localeCompare``: case-insensitive, lowercase first on ties."""
    value = value or ''
    return (value.casefold(), value.swapcase())


def load_courses(path):
    """Load the program records from the JSON document at ``path``.

    The records live under the top-level ``universities`` key; a document
    without it yields an empty list.
    """
    logger.info("=== LOADING DATA ===")
    logger.info(f"Attempting to load {path}")
    try:
        with open(path, 'r', encoding='utf-8') as file:
            data = json.load(file)
    except FileNotFoundError as e:
        logger.error(f"Data file not found: {path}")
        raise DataLoadError(f"Data file not found: {path}") from e
    except json.JSONDecodeError as e:
        logger.error("JSON file is malformed: %s", e)
        logger.error("Error occurred at line %d, column %d", e.lineno, e.colno)
        raise DataLoadError(f"Malformed JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        logger.error("Invalid JSON structure: top level is not an object")
        raise DataLoadError("Invalid JSON structure: expected an object with a 'universities' list")

    courses = data.get('universities') or []
    if not isinstance(courses, list):
        raise DataLoadError("Invalid JSON structure: 'universities' must be a list")
    if not all(isinstance(c, dict) for c in courses):
        logger.error("Invalid JSON structure: non-object entry in 'universities'")
        raise DataLoadError("Invalid JSON structure: every 'universities' entry must be an object")

    logger.info(f"Loaded {len(courses)} courses")
    stats = dataset_stats(courses)
    logger.debug(f"Universities: {stats['universities']}, categories: {stats['categories']}")
    return courses


def _distinct(courses, field):
    return {c.get(field) for c in courses if c.get(field)}


def university_options(courses):
    # Later records overwrite earlier ones for the same name
    by_name = {}
    for c in courses:
        name = c.get('university_name')
        if not name:
            continue
        by_name[name] = {
            'name': name,
            'short': c.get('university_short', ''),
            'location': c.get('location', ''),
        }
    return sorted(by_name.values(), key=lambda u: locale_key(u['name']))


def course_names(courses):
    return sorted(_distinct(courses, 'standard_course_name'))


def categories(courses):
    return sorted(_distinct(courses, 'course_category'))


def course_options(courses, university='', category='', current=''):
    """Course dropdown entries for the selected university and category.

    Returns ``(options, selected)`` where ``selected`` keeps ``current`` only if
    it is still one of the options.
    """
    relevant = courses
    if university:
        relevant = [c for c in relevant if c.get('university_name') == university]
    if category:
        relevant = [c for c in relevant if c.get('course_category') == category]

    options = course_names(relevant)
    selected = current if current in options else ''
    return options, selected


def dataset_stats(courses):
    return {
        'universities': len({c.get('university_name') for c in courses}),
        'courses': len(courses),
        'categories': len({c.get('course_category') for c in courses}),
    }
