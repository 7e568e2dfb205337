"""
Record Diff
===========
Field-level comparison of two entry ``data`` snapshots.

Each key is compared according to its value kind: row lists by ordered
structural equality, nested records by canonical serialization, scalars by
their normalized comparison key. A changed repeating section is reported
under its section key only, never per row or sub-field.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from app.domain.log_record import field_kind
from app.enums.common import FieldKind
from app.utils.normalization import same_scalar


@dataclass(frozen=True)
class RecordDiff:
    """Names of the fields that differ between two records."""

    changed_fields: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.changed_fields)


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"), default=str)


# Marks a key missing from one side of a diff, as opposed to an explicit None
_ABSENT = object()


def rows_equal(first: Any, second: Any) -> bool:
    """Ordered structural equality; anything that is not a list never matches."""
    if not isinstance(first, (list, tuple)) or not isinstance(second, (list, tuple)):
        return False
    if len(first) != len(second):
        return False
    return _canonical(list(first)) == _canonical(list(second))


def records_equal(first: Any, second: Any) -> bool:
    return _canonical(first) == _canonical(second)


def _kind_of_pair(previous: Any, current: Any) -> FieldKind:
    kinds = {field_kind(previous), field_kind(current)}
    if FieldKind.ROW_LIST in kinds:
        return FieldKind.ROW_LIST
    if FieldKind.RECORD in kinds:
        return FieldKind.RECORD
    return FieldKind.SCALAR


def field_changed(previous: Any, current: Any) -> bool:
    kind = _kind_of_pair(previous, current)
    if kind is FieldKind.ROW_LIST:
        # A section missing from one record counts as an empty row list
        previous = [] if previous is _ABSENT else previous
        current = [] if current is _ABSENT else current
        return not rows_equal(previous, current)
    previous = None if previous is _ABSENT else previous
    current = None if current is _ABSENT else current
    if kind is FieldKind.RECORD:
        return not records_equal(previous, current)
    return not same_scalar(previous, current)


def diff_records(previous: Mapping[str, Any] | None, current: Mapping[str, Any] | None) -> RecordDiff:
    """
    Compare two records and list the changed field names.

    Args:
        previous: Older snapshot (None is treated as an empty record)
        current: Newer snapshot (None is treated as an empty record)

    Returns:
        RecordDiff with deduplicated field names in first-seen key order.
        A row list present on one side only is unchanged when it is empty.
    """
    previous = previous or {}
    current = current or {}

    keys = list(dict.fromkeys([*previous.keys(), *current.keys()]))
    changed = [key for key in keys if field_changed(previous.get(key, _ABSENT), current.get(key, _ABSENT))]
    return RecordDiff(changed_fields=changed)
