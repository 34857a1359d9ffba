import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dabs_site.services.exceptions import SchemaMismatchError
from dabs_site.services.sheet_schema import (
    REQUEST_SCHEMA,
    STORE_SCHEMA,
    normalize_header,
)


def test_normalize_header_ignores_case_spacing_and_punctuation() -> None:
    assert normalize_header("  Zip Code ") == "zipcode"
    assert normalize_header("Phone #") == "phone"
    assert normalize_header("E-mail") == "email"


def test_store_schema_projects_by_column_name_not_position() -> None:
    header = ["Name", "Latitude", "Longitude", "State", "City", "Address", "ZIP", "Phone"]
    row = ["Green Leaf", "35.1", "-106.6", "NM", "Albuquerque", "1 Main St", "87101", "(505) 555-0100"]

    bound = STORE_SCHEMA.bind(header)
    record = bound.project(row)

    assert record == {
        "state": "NM",
        "name": "Green Leaf",
        "address": "1 Main St",
        "city": "Albuquerque",
        "zip": "87101",
        "phone": "(505) 555-0100",
        "lat": "35.1",
        "lng": "-106.6",
    }


def test_missing_required_columns_fail_fast() -> None:
    with pytest.raises(SchemaMismatchError) as excinfo:
        STORE_SCHEMA.bind(["State", "Name", "Address", "City", "Zip", "Phone"])

    assert excinfo.value.missing == ["lat", "lng"]
    assert "lat, lng" in str(excinfo.value)


def test_optional_columns_may_be_absent_and_short_rows_pad_with_blanks() -> None:
    bound = REQUEST_SCHEMA.bind(["Timestamp", "City", "Store", "Product"])

    record = bound.project(["2026-10-01T10:00:00.000Z", "Portland"])

    assert record["city"] == "Portland"
    assert record["store"] == ""
    assert record["email"] == ""
    assert record["status"] == ""


def test_project_all_skips_blank_rows() -> None:
    bound = REQUEST_SCHEMA.bind(["Timestamp", "City", "Store", "Product"])

    records = bound.project_all([["t", "Bend", "Mountain High", "Badder"], [], ["", " "]])

    assert len(records) == 1
    assert records[0]["store"] == "Mountain High"
