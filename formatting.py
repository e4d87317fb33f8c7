from settings import DISPLAY_LIMIT

NOT_SPECIFIED = 'Not specified'

RESET_MESSAGE = 'Select filters and click "Show CUET Papers" to see results'
TRUNCATION_NOTICE = "Showing first {limit} results. Use filters to narrow down your search."

SORT_ICONS = {'asc': '↑', 'desc': '↓'}
UNSORTED_ICON = '↕'


def format_row(record):
    """Display values for one result table row."""
    gt_req = record.get('cuet_general_test_req') or ''
    gt_class = 'yes' if gt_req.lower() == 'yes' else 'no'

    return {
        'university_name': record.get('university_name') or '',
        'university_short': record.get('university_short') or '',
        'location': record.get('location') or '',
        'course_name': record.get('course_name') or '',
        'standard_course_name': record.get('standard_course_name') or '',
        'course_category': record.get('course_category') or '',
        'language_req': record.get('cuet_language_req') or NOT_SPECIFIED,
        'domain_req': record.get('cuet_domain_subjects_req') or NOT_SPECIFIED,
        'gt_class': gt_class,
        'gt_icon': '✔' if gt_class == 'yes' else '✗',
        'gt_text': gt_req or NOT_SPECIFIED,
        'stream': record.get('stream_12th') or 'Any',
        'comments': record.get('comments') or '-',
    }


def results_count_message(count, reset=False):
    if reset:
        return RESET_MESSAGE
    if count == 0:
        return 'No matching programs found'
    if count == 1:
        return 'Found 1 matching program'
    return f"Found {count} matching programs"


def truncation_notice(limit=DISPLAY_LIMIT):
    return TRUNCATION_NOTICE.format(limit=limit)


def sort_icon(state, field):
    if state is not None and state.field == field:
        return SORT_ICONS[state.direction]
    return UNSORTED_ICON
