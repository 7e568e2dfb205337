import json
import re

import pytest

from app.domain.log_record import (
    build_export_file_name,
    compact_rows,
    create_entry_id,
    export_payload,
    field_kind,
    humanize_field_name,
    is_blank_row,
    normalize_payload,
)
from app.enums.common import FieldKind


class TestFieldKind:
    @pytest.mark.parametrize(
        "value, kind",
        [
            ([], FieldKind.ROW_LIST),
            ({"a": 1}, FieldKind.RECORD),
            ("text", FieldKind.SCALAR),
            (0, FieldKind.SCALAR),
            (False, FieldKind.SCALAR),
        ],
    )
    def test_classification(self, value, kind):
        assert field_kind(value) is kind

    def test_missing_value(self):
        assert field_kind(None) is None


class TestCompactRows:
    def test_blank_rows_are_dropped_in_order(self):
        rows = [{"time": "", "volume": ""}, {"time": "06:00", "volume": ""}, {"time": "", "volume": "3"}]
        assert compact_rows(rows) == [{"time": "06:00", "volume": ""}, {"time": "", "volume": "3"}]

    def test_row_with_false_value_is_kept(self):
        assert not is_blank_row({"done": False, "note": ""})

    def test_non_list_section_becomes_empty(self):
        assert compact_rows("oops") == []

    def test_normalize_payload_compacts_only_sections(self):
        payload = {"meta_date": "2024-03-01", "pest": [{"trap": ""}], "notes": ""}
        data = normalize_payload(payload)
        assert data == {"meta_date": "2024-03-01", "pest": [], "notes": ""}
        assert payload["pest"] == [{"trap": ""}]


class TestLabels:
    def test_known_field(self):
        assert humanize_field_name("meta_date") == "Datum"

    def test_section_label(self):
        assert humanize_field_name("irrigation") == "Bewaesserung & Substrat"

    def test_fallback_title_case(self):
        assert humanize_field_name("custom_field_name") == "Custom Field Name"


class TestIdsAndExport:
    def test_entry_id_sanitizes_date(self):
        entry_id = create_entry_id("2024-03-01")
        assert re.match(r"^2024-03-01-[0-9a-f-]{36}$", entry_id)

    def test_entry_id_replaces_non_alphanumerics(self):
        assert create_entry_id("01.03.2024").startswith("01-03-2024-")

    def test_entry_id_fallback_base(self):
        assert create_entry_id("").startswith("eintrag-")
        assert create_entry_id(None).startswith("eintrag-")

    def test_entry_ids_are_unique(self):
        assert create_entry_id("2024-03-01") != create_entry_id("2024-03-01")

    def test_export_file_name(self):
        assert build_export_file_name("2024-03-01") == "tagesprotokoll-2024-03-01.json"
        assert build_export_file_name("", today="2024-04-02") == "tagesprotokoll-2024-04-02.json"

    def test_export_payload_is_indented_and_keeps_umlauts(self):
        text = export_payload({"meta_zone": "Gewächshaus 2"})
        assert text == '{\n  "meta_zone": "Gewächshaus 2"\n}'
        assert json.loads(text) == {"meta_zone": "Gewächshaus 2"}
