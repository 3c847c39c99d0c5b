import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence
import xml.etree.ElementTree as ET

import pandas as pd

logger = logging.getLogger("addressbook.exporters")

MESSAGE_PERSONS_LISTED_OVERVIEW = "{count} persons listed!"
FIELDNAMES = ["name", "phone", "email", "address", "tags"]


def get_message_for_person_list_shown_summary(persons: Sequence[Any]) -> str:
    return MESSAGE_PERSONS_LISTED_OVERVIEW.format(count=len(persons))


def format_person(person: Any) -> str:
    tags = "".join(f"[{t}]" for t in sorted(person.tags))
    return f"{person.name} Phone: {person.phone} Email: {person.email} Tags: {tags}"


def format_person_list(persons: Sequence[Any]) -> str:
    return "\n".join(f"{i}. {format_person(p)}" for i, p in enumerate(persons, start=1))


def _to_dicts(persons: Iterable[Any]) -> List[Dict[str, Any]]:
    return [p.as_dict() for p in persons]


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def export_json(persons: Sequence[Any], path: Path) -> None:
    _ensure_parent(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(_to_dicts(persons), f, ensure_ascii=False, indent=2)


def export_csv(persons: Sequence[Any], path: Path) -> None:
    _ensure_parent(path)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        for r in _to_dicts(persons):
            r["tags"] = ";".join(r["tags"])
            writer.writerow(r)


def export_excel(persons: Sequence[Any], path: Path) -> None:
    _ensure_parent(path)
    rows = _to_dicts(persons)
    for r in rows:
        r["tags"] = ";".join(r["tags"])
    df = pd.DataFrame.from_records(rows, columns=FIELDNAMES)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="persons")


def export_xml(persons: Iterable[Any], path: Path) -> None:
    _ensure_parent(path)
    root = ET.Element("addressbook")
    for r in _to_dicts(persons):
        rec = ET.SubElement(root, "person")
        for k in ("name", "phone", "email", "address"):
            child = ET.SubElement(rec, k)
            child.text = r[k]
        for t in r["tags"]:
            ET.SubElement(rec, "tag").text = t
    tree = ET.ElementTree(root)
    tree.write(path, encoding="utf-8", xml_declaration=True)


def export_records(persons: Sequence[Any], path: Path, fmt: str) -> None:
    fmt = fmt.lower().strip()
    if fmt == "json":
        export_json(persons, path)
    elif fmt == "csv":
        export_csv(persons, path)
    elif fmt in {"excel", "xlsx"}:
        export_excel(persons, path)
    elif fmt == "xml":
        export_xml(persons, path)
    else:
        raise ValueError(f"Unsupported export format: {fmt}")
    logger.info("Exported %d persons to %s (%s)", len(persons), path, fmt)
