"""
Log Record Helpers
==================
Shape rules for the structured record produced by the entry form.

A record maps field keys to scalars, plus one ordered row list per
repeating section (irrigation, nutrient, pest, incident). These helpers
classify values, drop unfilled template rows, label fields for display
and derive entry ids and export file names.
"""

from __future__ import annotations

import json
import re
import uuid
from collections.abc import Mapping
from typing import Any

from app.constants import ENTRY_ID_FALLBACK_BASE, EXPORT_FILE_PREFIX, EXPORT_INDENT
from app.enums.common import FieldKind
from app.utils.time import today_iso

REPEATING_SECTIONS: dict[str, str] = {
    "irrigation": "Bewaesserung & Substrat",
    "nutrient": "Naehrloesung",
    "pest": "Schaedlingsmonitoring",
    "incident": "Alarme & Ereignisse",
}

FIELD_LABELS: dict[str, str] = {
    "meta_date": "Datum",
    "meta_zone": "Gewaechshaus / Zone",
    "meta_crop": "Kultur",
    "meta_responsible": "Verantwortlich",
    "meta_shift": "Schicht",
    "climate_inside_temp_min": "Innen-Temperatur Minimum",
    "climate_inside_temp_max": "Innen-Temperatur Maximum",
    "climate_inside_temp_avg": "Innen-Temperatur Durchschnitt",
    "climate_outside_temp_min": "Aussen-Temperatur Minimum",
    "climate_outside_temp_max": "Aussen-Temperatur Maximum",
    "climate_outside_temp_avg": "Aussen-Temperatur Durchschnitt",
    "climate_rh_min": "Rel. Luftfeuchte Minimum",
    "climate_rh_max": "Rel. Luftfeuchte Maximum",
    "climate_rh_avg": "Rel. Luftfeuchte Durchschnitt",
    "climate_dewpoint_min": "Taupunkt Minimum",
    "climate_dewpoint_max": "Taupunkt Maximum",
    "climate_dewpoint_avg": "Taupunkt Durchschnitt",
    "climate_vpd_min": "VPD Minimum",
    "climate_vpd_max": "VPD Maximum",
    "climate_vpd_avg": "VPD Durchschnitt",
    "climate_co2_min": "CO2 Minimum",
    "climate_co2_max": "CO2 Maximum",
    "climate_co2_avg": "CO2 Durchschnitt",
    "climate_co21000_duration": "CO2 Dauer ueber 1000 ppm",
    "light_dli_value": "DLI",
    "light_ppfd_value": "PPFD",
    "light_hours_value": "Beleuchtungsstunden",
    "light_outage_count": "Lichtausfaelle",
    "pest_traps_count": "Fallenanzahl",
    "actions_todo": "To-do fuer morgen",
}

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_WORD_START = re.compile(r"\b\w")


def field_kind(value: Any) -> FieldKind | None:
    """Classify a record value; None for a missing value."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return FieldKind.ROW_LIST
    if isinstance(value, Mapping):
        return FieldKind.RECORD
    return FieldKind.SCALAR


def is_blank_row(row: Mapping[str, Any]) -> bool:
    """A template row nobody filled in: every value is empty text or None."""
    return all(value is None or value == "" for value in row.values())


def compact_rows(rows: Any) -> list[dict[str, Any]]:
    """Drop unfilled rows from a repeating section, keeping order."""
    if not isinstance(rows, (list, tuple)):
        return []
    return [dict(row) for row in rows if isinstance(row, Mapping) and not is_blank_row(row)]


def normalize_payload(payload: Mapping[str, Any] | None) -> dict[str, Any]:
    """Copy a form payload, compacting every repeating section present."""
    data = dict(payload or {})
    for section in REPEATING_SECTIONS:
        if section in data:
            data[section] = compact_rows(data[section])
    return data


def section_label(key: str) -> str:
    return REPEATING_SECTIONS.get(key, key)


def humanize_field_name(key: str) -> str:
    """Display label for a field key."""
    if key in FIELD_LABELS:
        return FIELD_LABELS[key]
    if key in REPEATING_SECTIONS:
        return section_label(key)
    return _WORD_START.sub(lambda m: m.group(0).upper(), key.replace("_", " "))


def create_entry_id(business_date: Any) -> str:
    """Mint an entry id from the business date plus a uuid4 token."""
    base = business_date if isinstance(business_date, str) and business_date else ENTRY_ID_FALLBACK_BASE
    return f"{_NON_ALNUM.sub('-', base)}-{uuid.uuid4()}"


def build_export_file_name(business_date: str | None, today: str | None = None) -> str:
    """``tagesprotokoll-<date>.json``, using today's date when none is set."""
    stamp = business_date or today or today_iso()
    return f"{EXPORT_FILE_PREFIX}-{stamp}.json"


def export_payload(payload: Mapping[str, Any]) -> str:
    """Serialize a record as indented JSON text."""
    return json.dumps(dict(payload), indent=EXPORT_INDENT, ensure_ascii=False)
