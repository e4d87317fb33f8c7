"""
Pytest fixtures for the CUET paper selector tests.

Provides a small deterministic program dataset, a JSON file holding it, and a
Flask test client built from that file.
"""
import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app import create_app  # noqa: E402
from settings import Settings  # noqa: E402


def _program(university, short, course, category, stream, **extra):
    record = {
        'university_name': university,
        'university_short': short,
        'location': extra.pop('location', 'New Delhi'),
        'standard_course_name': course,
        'course_name': extra.pop('course_name', course),
        'course_category': category,
        'cuet_language_req': extra.pop('cuet_language_req', 'English'),
        'cuet_domain_subjects_req': extra.pop('cuet_domain_subjects_req', 'Physics'),
        'cuet_general_test_req': extra.pop('cuet_general_test_req', 'No'),
        'stream_12th': stream,
        'comments': extra.pop('comments', ''),
    }
    record.update(extra)
    return record


SAMPLE_PROGRAMS = [
    _program('University of Delhi', 'DU', 'B.Sc. Physics', 'Science', 'Science (PCM)',
             comments='Maths compulsory'),
    _program('University of Delhi', 'DU', 'B.Com.', 'Commerce', 'Any stream',
             cuet_domain_subjects_req='Accountancy'),
    _program('banaras Hindu University', 'BHU', 'B.A. History', 'Arts', 'Humanities',
             location='Varanasi', cuet_general_test_req='Yes'),
    _program('Aligarh Muslim University', 'AMU', 'B.Tech. Computer', 'Engineering',
             'Science (PCM)', cuet_language_req='Urdu'),
    _program('Aligarh Muslim University', 'AMU', 'B.Com.', 'Commerce', 'Commerce',
             location='Aligarh'),
    _program('Jamia Millia Islamia', 'JMI', 'B.A. Mass Media', 'Arts', 'Any',
             cuet_general_test_req='yes'),
]


@pytest.fixture
def programs():
    return [dict(p) for p in SAMPLE_PROGRAMS]


@pytest.fixture
def data_file(tmp_path, programs):
    path = tmp_path / 'cuet-data.json'
    path.write_text(json.dumps({'universities': programs}), encoding='utf-8')
    return path


@pytest.fixture
def app(data_file):
    return create_app(settings=Settings(data_file=str(data_file)))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def many_programs_file(tmp_path):
    """Dataset larger than the display limit."""
    records = [
        _program(f'University {i:03d}', f'U{i}', 'B.A. Economics', 'Arts', 'Any')
        for i in range(250)
    ]
    path = tmp_path / 'big.json'
    path.write_text(json.dumps({'universities': records}), encoding='utf-8')
    return path
