from __future__ import annotations

import re

from geocode_mcp.core.countries import COUNTRY_PROFILES
from geocode_mcp.core.models import AddressDiagnosis
from geocode_mcp.core.text import has_marker, normalize_text, split_components
from geocode_mcp.core.variations import PLACEHOLDERS

STREET_PLACEHOLDERS = PLACEHOLDERS | {"NO STREET", "MISSING", "UNDEFINED"}

_LEADING_NUMBER = re.compile(r"^(\d[\dA-Z\-]*),", re.IGNORECASE)
_SHORT_CODE = re.compile(r"^[A-Z]{1,3}$")
_DIGITS_ONLY = re.compile(r"^\d+$")
_HAS_LETTER = re.compile(r"[a-zA-Z]")
_HAS_DIGIT = re.compile(r"\d")
_STREET_WORDS = re.compile(
    r"\b(rue|street|st|avenue|ave|road|rd|drive|dr|lane|ln|boulevard|blvd|place|pl|way|court|ct|"
    r"square|sq|alley|path|chemin|chaussee|route|rt|impasse|allee|quai|passage|promenade|"
    r"esplanade|laangert|an|am|bei|zur|zum|strasse|str|gasse|platz|weg|ring|damm|berg|tal|feld|"
    r"hof|markt|dorf|siedlung|park|garten|straat|laan|steenweg|plein|dreef)\b",
    re.IGNORECASE,
)

CITY_NAMES = frozenset(
    {
        "namur",
        "brussels",
        "bruxelles",
        "antwerp",
        "anvers",
        "ghent",
        "gent",
        "charleroi",
        "liege",
        "luik",
        "bruges",
        "brugge",
        "luxembourg",
        "letzebuerg",
        "esch",
        "differdange",
        "dudelange",
        "petange",
        "sanem",
        "bettembourg",
        "schifflange",
        "kayl",
        "rumelange",
        "mondercange",
    }
)

BELGIAN_ADMIN_TERMS = (
    "province-de-luxembourg",
    "bastogne",
    "liege",
    "namur",
    "hainaut",
    "brabant",
    "flandre",
    "wallonie",
)


def validate_address(address: str) -> bool:
    """True when the first component looks like a real street."""
    if not address or not address.strip():
        return False

    text = normalize_text(address, preserve_replacement=True)
    text = _LEADING_NUMBER.sub(r"\1", text)

    street = split_components(text)[0]
    if not street:
        return False
    if street.upper() in STREET_PLACEHOLDERS:
        return False
    if len(street) < 3:
        return False
    if _SHORT_CODE.match(street):
        return False
    if _DIGITS_ONLY.match(street):
        return False

    if street.lower() in CITY_NAMES and not _HAS_DIGIT.search(street) and not _STREET_WORDS.search(street):
        return False

    return bool(_HAS_LETTER.search(street))


def diagnose(address: str) -> AddressDiagnosis:
    text = normalize_text(address, preserve_replacement=True)
    parts = split_components(text)
    lowered = text.lower()
    problems: list[str] = []

    if len(parts) > 5:
        problems.append("too_many_parts")

    mentions = sum(lowered.count(p.name.lower()) for p in COUNTRY_PROFILES)
    if mentions > 1:
        problems.append("duplicate_country")

    if parts and parts[0].upper() in PLACEHOLDERS:
        problems.append("placeholder_prefix")

    if has_marker(text):
        problems.append("encoding_corruption")

    for term in BELGIAN_ADMIN_TERMS:
        if term in lowered:
            problems.append(f"belgian_admin:{term}")

    is_valid = validate_address(address)
    if not is_valid:
        problems.append("invalid_street")

    return AddressDiagnosis(address=address, is_valid=is_valid, problems=problems)
