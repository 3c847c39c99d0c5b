import json
from pathlib import Path
from typing import Any, Dict

# REQUEST_TIMEOUT and USER_AGENT only apply to address books fetched over http(s).
DEFAULT_SETTINGS: Dict[str, Any] = {
    "REQUEST_TIMEOUT": 15,
    "LOG_LEVEL": "INFO",
    "USER_AGENT": "Mozilla/5.0",
}


def load_settings(path: Path) -> Dict[str, Any]:
    """
    Settings for the address book runner, read from a JSON object and laid
    over DEFAULT_SETTINGS. A missing file means the defaults.
    Raises ValueError for invalid JSON or a non-object document.
    """
    settings = dict(DEFAULT_SETTINGS)
    if not path.exists():
        return settings
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if data is None:
        return settings
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a JSON object.")
    unknown = sorted(set(data) - set(DEFAULT_SETTINGS))
    if unknown:
        raise ValueError(f"Unknown settings in {path}: {', '.join(unknown)}")
    settings.update(data)
    return settings
