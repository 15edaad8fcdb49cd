"""Whole-record JSON persistence, one file per (teacher, class/section)."""
import json
import logging
import os
from typing import Dict

from errors import InvalidRecordKey, RecordExists, RecordNotFound
from gradebook import GradebookState, info_to_dict, state_from_dict, to_dict

logger = logging.getLogger(__name__)

DATA_DIR = os.environ.get("GRADEBOOK_DATA_DIR", "./data")


def _records_dir(teacher_id: str) -> str:
    return os.path.join(DATA_DIR, "gradebooks", _safe_name(teacher_id, "teacher id"))


def _safe_name(name: str, what: str) -> str:
    name = (name or "").strip()
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise InvalidRecordKey(f"Invalid {what}: {name!r}")
    return name


def _record_path(teacher_id: str, key: str) -> str:
    return os.path.join(_records_dir(teacher_id), f"{_safe_name(key, 'record key')}.json")


def make_record_key(class_name: str, section: str) -> str:
    """Record key for a class/section pair, e.g. ``"الخامس_أ"``."""
    class_name = (class_name or "").strip()
    section = (section or "").strip()
    if not class_name or not section:
        raise InvalidRecordKey("Both class and section are required")
    return _safe_name(f"{class_name}_{section}", "record key")


def record_exists(teacher_id: str, key: str) -> bool:
    return os.path.isfile(_record_path(teacher_id, key))


def list_records(teacher_id: str) -> Dict[str, dict]:
    """Return ``{record_key: info}`` for every saved record of the teacher."""
    records_dir = _records_dir(teacher_id)
    if not os.path.isdir(records_dir):
        return {}
    records = {}
    for filename in sorted(os.listdir(records_dir)):
        if not filename.endswith(".json"):
            continue
        key = filename[: -len(".json")]
        with open(os.path.join(records_dir, filename), "r", encoding="utf-8") as f:
            data = json.load(f)
        records[key] = info_to_dict(state_from_dict(data).info)
    return records


def load_record(teacher_id: str, key: str) -> GradebookState:
    path = _record_path(teacher_id, key)
    if not os.path.exists(path):
        raise RecordNotFound(f"No record {key!r} for teacher {teacher_id!r}")
    with open(path, "r", encoding="utf-8") as f:
        return state_from_dict(json.load(f))


def save_record(teacher_id: str, key: str, state: GradebookState) -> None:
    path = _record_path(teacher_id, key)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    tmp_path = path + ".tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(to_dict(state), f, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)
    logger.info("Saved record %s/%s (%d students)", teacher_id, key, len(state.students))


def create_record(teacher_id: str, key: str, state: GradebookState) -> None:
    if record_exists(teacher_id, key):
        raise RecordExists(f"A record named {key!r} already exists")
    save_record(teacher_id, key, state)


def delete_record(teacher_id: str, key: str) -> None:
    path = _record_path(teacher_id, key)
    if not os.path.exists(path):
        raise RecordNotFound(f"No record {key!r} for teacher {teacher_id!r}")
    os.remove(path)
    logger.info("Deleted record %s/%s", teacher_id, key)
