import json
import logging

from flask import Blueprint, Flask, current_app, jsonify, render_template, request
from werkzeug.exceptions import BadRequest, UnsupportedMediaType

import catalog
from catalog import DataLoadError
from formatting import format_row, results_count_message, sort_icon, truncation_notice
from selector import (
    FilterCriteria,
    InvalidFilterValue,
    InvalidSortDirection,
    InvalidSortField,
    SortState,
    run_query,
    text_value,
)
from settings import LOG_FORMAT, SORT_FIELDS, Settings

# Request body keys that must be strings when present
TEXT_FIELDS = ('university', 'course', 'category', 'stream', 'q')

_env_settings = Settings.from_env()

logging.basicConfig(
    level=getattr(logging, _env_settings.log_level, logging.INFO),
    format=LOG_FORMAT
)
logger = logging.getLogger(__name__)

bp = Blueprint('main', __name__)


def _courses():
    return current_app.config['COURSES']


def _settings():
    return current_app.config['SETTINGS']


def _read_json_body():
    """Parsed JSON object from the request, or ``(error_response, status)``."""
    try:
        body = request.get_json()
    except (BadRequest, UnsupportedMediaType) as e:
        logger.error(f"Failed to parse JSON: {str(e)}")
        return None, (jsonify({
            'error': 'Invalid JSON data',
            'details': str(e)
        }), 400)

    if body is None:
        body = {}
    if not isinstance(body, dict):
        logger.error(f"Request body is not an object: {type(body).__name__}")
        return None, (jsonify({
            'error': 'Request body must be a JSON object',
            'help': 'Send filters as {"university": ..., "course": ..., "category": ..., "stream": ...}'
        }), 400)

    for key in TEXT_FIELDS:
        try:
            text_value(body, key)
        except InvalidFilterValue as e:
            logger.error(f"Invalid filter value: {str(e)}")
            return None, (jsonify({
                'error': f"Invalid value for '{key}'",
                'details': str(e)
            }), 400)

    logger.debug(f"Parsed JSON input: {json.dumps(body)}")
    return body, None


def _sort_from_body(body):
    sort = body.get('sort') or {}
    if not isinstance(sort, dict):
        raise InvalidSortField(f"Invalid sort value: {sort!r}")
    return SortState(field=sort.get('field') or None, direction=sort.get('direction') or 'asc')


def _query_response(body, sort):
    criteria = FilterCriteria.from_mapping(body)
    term = text_value(body, 'q')
    limit = _settings().display_limit

    logger.info(f"Query: {criteria}, q={term!r}, sort={sort.to_dict()}")
    result = run_query(_courses(), criteria, term=term, sort=sort, limit=limit)
    logger.info(f"Matched {result.total} programs, returning {len(result.rows)}")

    return jsonify({
        'count': len(result.rows),
        'total': result.total,
        'truncated': result.truncated,
        'notice': truncation_notice(limit) if result.truncated else None,
        'message': results_count_message(result.total),
        'results': [format_row(r) for r in result.rows],
        'sort': result.sort.to_dict(),
    })


def _bad_sort(e):
    logger.error(f"Invalid sort request: {str(e)}")
    return jsonify({
        'error': str(e),
        'valid_fields': sorted(SORT_FIELDS),
        'valid_directions': ['asc', 'desc']
    }), 400


@bp.route('/')
def index():
    """
    Renders the selector page. Dropdowns are always populated; the result table
    is only filled once the form has been submitted with ``search``.
    """
    courses = _courses()
    settings = _settings()
    args = request.args

    criteria = FilterCriteria.from_mapping(args)
    course_list, selected_course = catalog.course_options(
        courses, criteria.university, criteria.category, criteria.course
    )
    criteria.course = selected_course

    try:
        sort = SortState(field=args.get('sort') or None, direction=args.get('direction') or 'asc')
    except (InvalidSortField, InvalidSortDirection) as e:
        logger.warning(f"Ignoring sort arguments: {str(e)}")
        sort = SortState()

    result = None
    sort_links = {}
    if 'search' in args:
        result = run_query(courses, criteria, term=args.get('q', ''), sort=sort,
                           limit=settings.display_limit)
        base_args = {k: v for k, v in args.items() if k not in ('sort', 'direction')}
        for sort_field in SORT_FIELDS:
            next_state = SortState(sort.field, sort.direction).toggle(sort_field)
            sort_links[sort_field] = dict(base_args, sort=next_state.field,
                                          direction=next_state.direction)

    return render_template(
        'index.html',
        universities=catalog.university_options(courses),
        courses=course_list,
        categories=catalog.categories(courses),
        streams=settings.stream_options,
        stats=catalog.dataset_stats(courses),
        criteria=criteria,
        term=args.get('q', ''),
        result=result,
        rows=[format_row(r) for r in result.rows] if result else [],
        message=results_count_message(result.total if result else 0, reset=result is None),
        notice=truncation_notice(settings.display_limit),
        sort=sort,
        sort_icon=sort_icon,
        sort_links=sort_links,
    )


@bp.route('/api/search', methods=['POST'])
def search():
    try:
        logger.info("=== NEW SEARCH REQUEST ===")
        body, error = _read_json_body()
        if error:
            return error

        try:
            sort = _sort_from_body(body)
        except (InvalidSortField, InvalidSortDirection) as e:
            return _bad_sort(e)

        return _query_response(body, sort)
    except Exception as e:
        logger.error(f"Unexpected error in search route: {str(e)}", exc_info=True)
        return jsonify({'error': f"An unexpected error occurred: {str(e)}"}), 500


@bp.route('/api/sort', methods=['POST'])
def sort():
    try:
        logger.info("=== NEW SORT REQUEST ===")
        body, error = _read_json_body()
        if error:
            return error

        sort_field = body.get('field')
        if not sort_field:
            return jsonify({
                'error': 'Missing required field: field',
                'valid_fields': sorted(SORT_FIELDS)
            }), 400

        try:
            state = _sort_from_body(body).toggle(sort_field)
        except (InvalidSortField, InvalidSortDirection) as e:
            return _bad_sort(e)

        return _query_response(body, state)
    except Exception as e:
        logger.error(f"Unexpected error in sort route: {str(e)}", exc_info=True)
        return jsonify({'error': f"An unexpected error occurred: {str(e)}"}), 500


@bp.route('/api/courses')
def get_courses():
    """Course dropdown entries narrowed by university and category."""
    try:
        options, selected = catalog.course_options(
            _courses(),
            university=request.args.get('university', ''),
            category=request.args.get('category', ''),
            current=request.args.get('current', ''),
        )
        return jsonify({'courses': options, 'selected': selected})
    except Exception as e:
        logger.error(f"Error in get_courses route: {str(e)}", exc_info=True)
        return jsonify({'error': str(e)}), 500


@bp.route('/api/options')
def get_options():
    courses = _courses()
    return jsonify({
        'universities': catalog.university_options(courses),
        'courses': catalog.course_names(courses),
        'categories': catalog.categories(courses),
        'streams': _settings().stream_options,
    })


@bp.route('/api/stats')
def get_stats():
    return jsonify(catalog.dataset_stats(_courses()))


def create_app(data_file=None, settings=None):
    """Build the app with the dataset loaded once into ``app.config``."""
    settings = settings or Settings.from_env()
    if data_file:
        settings.data_file = data_file

    app = Flask(__name__)
    app.json.ensure_ascii = False

    try:
        courses = catalog.load_courses(settings.data_file)
    except DataLoadError:
        logger.error("Failed to initialize application", exc_info=True)
        raise

    app.config['COURSES'] = courses
    app.config['SETTINGS'] = settings
    app.register_blueprint(bp)

    stats = catalog.dataset_stats(courses)
    logger.info("=== DATA STATISTICS ===")
    logger.info(f"Total programs: {stats['courses']}")
    logger.info(f"Unique universities: {stats['universities']}")
    logger.info(f"Unique categories: {stats['categories']}")
    return app


if __name__ == '__main__':
    create_app(settings=_env_settings).run(
        host=_env_settings.host,
        port=_env_settings.port,
        debug=_env_settings.debug
    )
