import os
from dataclasses import dataclass, field

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

DEFAULT_DATA_FILE = os.path.join(BASE_DIR, 'cuet-data.json')

# Rows rendered per result table; there is no pagination beyond this
DISPLAY_LIMIT = 200

# Sortable columns and the record field each one orders on
SORT_FIELDS = {
    'university': 'university_name',
    'course': 'standard_course_name',
}
SORT_DIRECTIONS = ('asc', 'desc')

# Fields scanned by the in-table text search
SEARCHABLE_FIELDS = (
    'university_name',
    'university_short',
    'standard_course_name',
    'course_name',
    'course_category',
    'cuet_domain_subjects_req',
    'cuet_language_req',
    'comments',
)

# 12th stream dropdown; "Any" only matches programs open to every stream
STREAM_OPTIONS = ['Any', 'Science', 'Commerce', 'Arts', 'Humanities', 'Vocational']

LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class Settings:
    """Runtime settings, read from ``CUET_*`` environment variables."""

    data_file: str = DEFAULT_DATA_FILE
    display_limit: int = DISPLAY_LIMIT
    log_level: str = 'INFO'
    host: str = '127.0.0.1'
    port: int = 5000
    debug: bool = False
    stream_options: list = field(default_factory=lambda: list(STREAM_OPTIONS))

    @classmethod
    def from_env(cls):
        return cls(
            data_file=os.environ.get('CUET_DATA_FILE', DEFAULT_DATA_FILE),
            display_limit=int(os.environ.get('CUET_DISPLAY_LIMIT', DISPLAY_LIMIT)),
            log_level=os.environ.get('CUET_LOG_LEVEL', 'INFO').upper(),
            host=os.environ.get('CUET_HOST', '127.0.0.1'),
            port=int(os.environ.get('CUET_PORT', 5000)),
            debug=_env_bool('CUET_DEBUG'),
        )
