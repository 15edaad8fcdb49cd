import json
import os

import pytest

import storage
from errors import InvalidRecordKey, RecordExists, RecordNotFound
from gradebook import state_from_dict, to_dict
from helpers import make_state


def test_save_and_load_round_trip():
    state = make_state([15, 25], exam_max=40, students=[{"s0-m0-c0": 10, "midYear": None}, {}])
    storage.save_record("t1", "الخامس_أ", state)
    loaded = storage.load_record("t1", "الخامس_أ")
    assert loaded == state
    assert to_dict(loaded) == to_dict(state)


def test_stored_json_uses_record_wire_shape(tmp_data_dir):
    storage.save_record("t1", "k", make_state([10], exam_max=60, students=[{"s0-m0-c0": 3}]))
    with open(os.path.join(tmp_data_dir, "gradebooks", "t1", "k.json"), encoding="utf-8") as f:
        data = json.load(f)
    assert data["info"]["examMaxGrade"] == 60
    assert data["semesters"][0]["months"][0]["customColumns"] == [{"title": "نشاط 1", "max": 10}]
    assert data["students"][0]["grades"] == {"s0-m0-c0": 3}


def test_loader_defaults_missing_fields():
    state = state_from_dict({
        "info": {"className": "السادس / ب"},
        "students": [{"id": 3, "name": "سارة"}],
        "semesters": [{"months": [{}]}],
    })
    assert state.info.class_name == "السادس / ب"
    assert state.info.exam_max_grade == 100
    assert state.info.year == "2025-2026"
    assert state.students[0].grades == {}
    assert len(state.semesters) == 2
    assert all(len(s.months) == 2 for s in state.semesters)
    assert state.columns(0, 0) == []
    assert state.columns(1, 1) == []


def test_loader_gives_missing_and_repeated_ids_fresh_values():
    state = state_from_dict({"students": [
        {"name": "أ"},
        {"id": 4, "name": "ب"},
        {"name": "ج"},
        {"id": 4, "name": "د"},
    ]})
    assert [s.id for s in state.students] == [5, 4, 6, 7]
    assert state.student(7).name == "د"


def test_loader_drops_negative_and_non_numeric_grades():
    state = state_from_dict({"students": [{"id": 1, "grades": {
        "s0-m0-exam": -40, "s0-m0-c0": "x", "midYear": "66", "finalExam": 900,
    }}]})
    assert state.students[0].grades == {
        "s0-m0-exam": None, "s0-m0-c0": None, "midYear": 66, "finalExam": 900,
    }


def test_loader_accepts_empty_document():
    state = state_from_dict({})
    assert state.students == []
    assert len(state.semesters) == 2


def test_list_records_returns_info(tmp_data_dir):
    assert storage.list_records("t1") == {}
    storage.save_record("t1", "a_1", make_state([]))
    storage.save_record("t1", "b_2", make_state([]))
    storage.save_record("t2", "c_3", make_state([]))
    records = storage.list_records("t1")
    assert list(records) == ["a_1", "b_2"]
    assert records["a_1"]["subjectName"] == "رياضيات"


def test_create_record_refuses_duplicates():
    storage.create_record("t1", "a_1", make_state([]))
    with pytest.raises(RecordExists):
        storage.create_record("t1", "a_1", make_state([]))


def test_missing_record():
    with pytest.raises(RecordNotFound):
        storage.load_record("t1", "nope")
    with pytest.raises(RecordNotFound):
        storage.delete_record("t1", "nope")


def test_delete_record():
    storage.save_record("t1", "a_1", make_state([]))
    storage.delete_record("t1", "a_1")
    assert not storage.record_exists("t1", "a_1")


def test_record_key():
    assert storage.make_record_key(" الخامس ", " أ ") == "الخامس_أ"
    with pytest.raises(InvalidRecordKey):
        storage.make_record_key("الخامس", "")
    with pytest.raises(InvalidRecordKey):
        storage.make_record_key("../x", "y/z")
    with pytest.raises(InvalidRecordKey):
        storage.load_record("..", "a")
