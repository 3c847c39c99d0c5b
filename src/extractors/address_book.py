import json
import logging
import re
import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Tuple

import pandas as pd
import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

logger = logging.getLogger("addressbook.loader")

_TAG_SEPARATORS = re.compile(r"[;,]")
REQUIRED_FIELDS = ("name", "phone", "email")


class AddressBookError(Exception):
    pass


class RequestError(Exception):
    pass


@dataclass(frozen=True)
class PersonRecord:
    name: str
    phone: str
    email: str
    address: str = ""
    tags: FrozenSet[str] = field(default_factory=frozenset)

    def words_in_name(self) -> List[str]:
        return self.name.split()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "tags": sorted(self.tags),
        }


class AddressBook:
    """
    In-memory list of persons. Callers always get a snapshot, never the
    backing list.
    """

    def __init__(self, persons: Iterable[PersonRecord] = ()):
        self._persons: List[PersonRecord] = list(persons)

    def get_all_persons(self) -> Tuple[PersonRecord, ...]:
        return tuple(self._persons)

    def __len__(self) -> int:
        return len(self._persons)


def _clean(value: Any) -> str:
    # pandas hands back NaN for empty cells
    if value is None or (isinstance(value, float) and value != value):
        return ""
    return str(value).strip()


def _parse_tags(raw: Any) -> FrozenSet[str]:
    if isinstance(raw, (list, tuple, set, frozenset)):
        items = [_clean(t) for t in raw]
    else:
        items = [_clean(t) for t in _TAG_SEPARATORS.split(_clean(raw))]
    return frozenset(t for t in items if t)


def person_from_mapping(data: Mapping[str, Any]) -> PersonRecord:
    missing = [k for k in REQUIRED_FIELDS if not _clean(data.get(k))]
    if missing:
        raise AddressBookError(f"Person entry is missing {', '.join(missing)}: {dict(data)!r}")
    return PersonRecord(
        name=_clean(data["name"]),
        phone=_clean(data["phone"]),
        email=_clean(data["email"]),
        address=_clean(data.get("address")),
        tags=_parse_tags(data.get("tags")),
    )


def _persons_from_payload(payload: Any) -> List[PersonRecord]:
    if isinstance(payload, dict):
        payload = payload.get("persons", [])
    if not isinstance(payload, list):
        raise AddressBookError("Address book JSON must be a list or an object with a 'persons' list.")
    return [person_from_mapping(p) for p in payload]


@retry(
    wait=wait_exponential(multiplier=1, min=1, max=8),
    stop=stop_after_attempt(3),
    retry=retry_if_exception_type(RequestError),
    reraise=True,
)
def _get(url: str, timeout: float, user_agent: str) -> requests.Response:
    headers = {
        "User-Agent": user_agent,
        "Accept": "application/json",
        "Cache-Control": "no-cache",
    }
    try:
        resp = requests.get(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise RequestError(str(e)) from e

    if resp.status_code >= 500:
        # transient
        raise RequestError(f"Server error {resp.status_code}")
    return resp


def _load_url(url: str, timeout: float, user_agent: str) -> List[PersonRecord]:
    logger.debug("Fetching %s", url)
    try:
        resp = _get(url, timeout=timeout, user_agent=user_agent)
    except RequestError as e:
        raise AddressBookError(f"Could not fetch {url}: {e}") from e
    if resp.status_code >= 400:
        raise AddressBookError(f"Could not fetch {url}: HTTP {resp.status_code}")
    try:
        payload = resp.json()
    except ValueError as e:
        raise AddressBookError(f"Response from {url} is not JSON") from e
    return _persons_from_payload(payload)


def _load_json(path: Path) -> List[PersonRecord]:
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise AddressBookError(f"{path} is not valid JSON: {e}") from e
    except (OSError, UnicodeDecodeError, ValueError) as e:
        raise AddressBookError(f"Could not read {path}: {e}") from e
    return _persons_from_payload(payload)


def _load_table(path: Path) -> List[PersonRecord]:
    try:
        if path.suffix.lower() == ".csv":
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        else:
            df = pd.read_excel(path, dtype=str, engine="openpyxl")
    # pandas parser errors are ValueErrors
    except (OSError, UnicodeDecodeError, ValueError, zipfile.BadZipFile) as e:
        raise AddressBookError(f"Could not read {path}: {e}") from e
    return [person_from_mapping(row) for row in df.to_dict(orient="records")]


def _load_xml(path: Path) -> List[PersonRecord]:
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise AddressBookError(f"{path} is not valid XML: {e}") from e
    except OSError as e:
        raise AddressBookError(f"Could not read {path}: {e}") from e
    persons: List[PersonRecord] = []
    for node in root.iter("person"):
        data: Dict[str, Any] = {k: node.findtext(k) for k in ("name", "phone", "email", "address")}
        data["tags"] = [t.text for t in node.findall("tag")]
        persons.append(person_from_mapping(data))
    return persons


_FILE_LOADERS = {
    ".json": _load_json,
    ".csv": _load_table,
    ".xlsx": _load_table,
    ".xml": _load_xml,
}


def load_address_book(source: str, timeout: float = 15.0, user_agent: str = "Mozilla/5.0") -> AddressBook:
    """
    Load an address book from a local file or an http(s) URL.
    Raises AddressBookError if the source is missing, unsupported or malformed.
    """
    if source.startswith(("http://", "https://")):
        persons = _load_url(source, timeout=timeout, user_agent=user_agent)
    else:
        path = Path(source)
        if not path.exists():
            raise AddressBookError(f"Address book not found: {path}")
        loader = _FILE_LOADERS.get(path.suffix.lower())
        if loader is None:
            raise AddressBookError(f"Unsupported address book format: {path.suffix or path.name}")
        persons = loader(path)
    logger.info("Loaded %d persons from %s", len(persons), source)
    return AddressBook(persons)
