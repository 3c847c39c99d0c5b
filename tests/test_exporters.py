import csv
import json

import pandas as pd
import pytest

from extractors.address_book import load_address_book
from outputs.exporters import (
    export_records,
    format_person_list,
    get_message_for_person_list_shown_summary,
)


def test_summary_message_counts_persons(persons):
    assert get_message_for_person_list_shown_summary(persons) == "2 persons listed!"
    assert get_message_for_person_list_shown_summary(()) == "0 persons listed!"


def test_format_person_list(persons):
    assert format_person_list(persons).splitlines() == [
        "1. Alice Tan Phone: 91234567 Email: alice@example.com Tags: ",
        "2. Bob Lee Phone: 98765432 Email: bob@example.com Tags: [friend]",
    ]


def test_export_json(tmp_path, persons):
    path = tmp_path / "out" / "persons.json"
    export_records(persons, path, "json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data[1] == {
        "name": "Bob Lee",
        "phone": "98765432",
        "email": "bob@example.com",
        "address": "",
        "tags": ["friend"],
    }


def test_export_csv(tmp_path, persons):
    path = tmp_path / "persons.csv"
    export_records(persons, path, "CSV")
    with path.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["name"] for r in rows] == ["Alice Tan", "Bob Lee"]
    assert rows[1]["tags"] == "friend"


def test_export_excel(tmp_path, persons):
    path = tmp_path / "persons.xlsx"
    export_records(persons, path, "excel")
    df = pd.read_excel(path, dtype=str, engine="openpyxl")
    assert list(df.columns) == ["name", "phone", "email", "address", "tags"]
    assert df["phone"].tolist() == ["91234567", "98765432"]


def test_export_xml_loads_back(tmp_path, persons):
    path = tmp_path / "persons.xml"
    export_records(persons, path, "xml")
    assert load_address_book(str(path)).get_all_persons() == tuple(persons)


def test_export_unsupported_format(tmp_path, persons):
    with pytest.raises(ValueError, match="Unsupported export format"):
        export_records(persons, tmp_path / "persons.yaml", "yaml")
