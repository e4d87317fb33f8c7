"""
Unit tests for catalog.py: dataset loading and dropdown option derivation.
"""
import json

import pytest

from catalog import (
    DataLoadError,
    categories,
    course_names,
    course_options,
    dataset_stats,
    load_courses,
    locale_key,
    university_options,
)


# ── load_courses ──────────────────────────────────────────────────────────────

class TestLoadCourses:

    def test_loads_universities_list(self, data_file, programs):
        assert load_courses(str(data_file)) == programs

    def test_missing_key_gives_empty_list(self, tmp_path):
        path = tmp_path / 'empty.json'
        path.write_text(json.dumps({'metadata': {}}), encoding='utf-8')
        assert load_courses(str(path)) == []

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(DataLoadError) as exc:
            load_courses(str(tmp_path / 'nope.json'))
        assert isinstance(exc.value.__cause__, FileNotFoundError)

    def test_malformed_json_raises(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text('{"universities": [', encoding='utf-8')
        with pytest.raises(DataLoadError):
            load_courses(str(path))

    def test_non_object_document_raises(self, tmp_path):
        path = tmp_path / 'list.json'
        path.write_text('[]', encoding='utf-8')
        with pytest.raises(DataLoadError):
            load_courses(str(path))

    def test_non_object_record_raises(self, tmp_path):
        path = tmp_path / 'strings.json'
        path.write_text(json.dumps({'universities': [{'university_name': 'DU'}, 'DU']}),
                        encoding='utf-8')
        with pytest.raises(DataLoadError):
            load_courses(str(path))

    def test_bundled_dataset_loads(self):
        from settings import DEFAULT_DATA_FILE
        courses = load_courses(DEFAULT_DATA_FILE)
        assert courses
        assert all('university_name' in c for c in courses)


# ── derived options ───────────────────────────────────────────────────────────

class TestOptions:

    def test_university_options_sorted_case_insensitively(self, programs):
        names = [u['name'] for u in university_options(programs)]
        assert names == [
            'Aligarh Muslim University',
            'banaras Hindu University',
            'Jamia Millia Islamia',
            'University of Delhi',
        ]

    def test_university_options_last_record_wins(self, programs):
        amu = [u for u in university_options(programs) if u['short'] == 'AMU'][0]
        assert amu['location'] == 'Aligarh'

    def test_course_names_distinct_and_sorted(self, programs):
        assert course_names(programs) == [
            'B.A. History', 'B.A. Mass Media', 'B.Com.', 'B.Sc. Physics', 'B.Tech. Computer',
        ]

    def test_categories(self, programs):
        assert categories(programs) == ['Arts', 'Commerce', 'Engineering', 'Science']

    def test_dataset_stats(self, programs):
        assert dataset_stats(programs) == {'universities': 4, 'courses': 6, 'categories': 4}

    def test_locale_key_orders_case_insensitively(self):
        assert sorted(['b', 'A', 'a', 'B'], key=locale_key) == ['a', 'A', 'b', 'B']

    def test_locale_key_puts_lowercase_first_on_ties(self):
        assert sorted(['IIT', 'iit', 'Iit'], key=locale_key) == ['iit', 'Iit', 'IIT']

    def test_locale_key_handles_none(self):
        assert locale_key(None) == ('', '')


# ── course_options ────────────────────────────────────────────────────────────

class TestCourseOptions:

    def test_no_restriction_lists_everything(self, programs):
        options, selected = course_options(programs)
        assert options == course_names(programs)
        assert selected == ''

    def test_restricted_by_university(self, programs):
        options, _ = course_options(programs, university='University of Delhi')
        assert options == ['B.Com.', 'B.Sc. Physics']

    def test_restricted_by_university_and_category(self, programs):
        options, _ = course_options(programs, university='Aligarh Muslim University',
                                    category='Commerce')
        assert options == ['B.Com.']

    def test_keeps_selection_when_still_offered(self, programs):
        _, selected = course_options(programs, category='Commerce', current='B.Com.')
        assert selected == 'B.Com.'

    def test_drops_selection_no_longer_offered(self, programs):
        _, selected = course_options(programs, category='Arts', current='B.Com.')
        assert selected == ''
