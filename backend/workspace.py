"""Records currently open for editing.

Edits change the open in-memory copy only.  Nothing reaches storage until
``save`` is called, and ``discard`` throws unsaved edits away.  Saving writes
the whole record, so two editors of the same record overwrite each other.
"""
import logging
from typing import Dict, Tuple

import storage
from gradebook import GradebookState

logger = logging.getLogger(__name__)

_open_records: Dict[Tuple[str, str], GradebookState] = {}


def get_record(teacher_id: str, key: str) -> GradebookState:
    """Return the open copy of a record, loading it from storage on first use."""
    ident = (teacher_id, key)
    if ident not in _open_records:
        _open_records[ident] = storage.load_record(teacher_id, key)
        logger.info("Opened record %s/%s", teacher_id, key)
    return _open_records[ident]


def replace(teacher_id: str, key: str, state: GradebookState) -> GradebookState:
    _open_records[(teacher_id, key)] = state
    return state


def save(teacher_id: str, key: str) -> GradebookState:
    state = get_record(teacher_id, key)
    storage.save_record(teacher_id, key, state)
    return state


def discard(teacher_id: str, key: str) -> bool:
    """Forget the open copy; returns whether anything was open."""
    dropped = _open_records.pop((teacher_id, key), None) is not None
    if dropped:
        logger.info("Discarded open copy of %s/%s", teacher_id, key)
    return dropped


def is_open(teacher_id: str, key: str) -> bool:
    return (teacher_id, key) in _open_records


def clear() -> None:
    _open_records.clear()
