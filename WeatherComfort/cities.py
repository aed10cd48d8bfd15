"""City list loading from the static cities document."""
import json
import logging
import os
from typing import List, Optional

from weather_data import CityId

DEFAULT_CITIES_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "cities.json")
DEFAULT_CITY_LIMIT = 10


class CityListError(Exception):
    """Raised when the cities document is missing or malformed."""
    pass


def load_city_codes(path: str = DEFAULT_CITIES_FILE, limit: Optional[int] = DEFAULT_CITY_LIMIT) -> List[CityId]:
    """
    Read city codes from a {"List": [{"CityCode": ...}, ...]} document.

    Codes keep file order; duplicates after the first are dropped, then the
    first `limit` codes are returned (all of them when limit is None).

    Raises:
        CityListError: If the file cannot be read or has no usable entries
    """
    try:
        with open(path, encoding="utf-8") as fh:
            document = json.load(fh)
    except (OSError, ValueError) as exc:
        raise CityListError(f"Cannot read cities file {path}: {exc}") from exc

    entries = document.get("List") if isinstance(document, dict) else None
    if not isinstance(entries, list):
        raise CityListError(f"Cities file {path} has no 'List' array")

    codes: List[CityId] = []
    seen = set()
    for entry in entries:
        code = entry.get("CityCode") if isinstance(entry, dict) else None
        if code is None:
            continue
        if isinstance(code, bool) or not isinstance(code, (str, int)):
            raise CityListError(f"Cities file {path} has an invalid CityCode: {code!r}")
        if code in seen:
            continue
        seen.add(code)
        codes.append(code)

    if not codes:
        raise CityListError(f"Cities file {path} contains no city codes")

    if limit is not None:
        codes = codes[:limit]
    logging.info("Loaded %s city codes from %s", len(codes), path)
    return codes
