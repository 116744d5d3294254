from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from geocode_mcp.core.text import split_components

log = logging.getLogger(__name__)

_POSTAL4 = re.compile(r"^\d{4}$")
_POSTAL5 = re.compile(r"^\d{5}$")

LUXEMBOURG_REGIONS = frozenset(
    {
        "centre",
        "nord",
        "sud",
        "est",
        "ouest",
        "canton",
        "capellen",
        "clervaux",
        "diekirch",
        "echternach",
        "esch-sur-alzette",
        "grevenmacher",
        "luxembourg",
        "mersch",
        "redange",
        "remich",
        "vianden",
        "wiltz",
    }
)


@dataclass(frozen=True)
class AddressParts:
    components: list[str]

    @classmethod
    def parse(cls, address: str) -> AddressParts:
        return cls(components=split_components(address))

    def __len__(self) -> int:
        return len(self.components)

    def at(self, idx: int) -> str:
        return self.components[idx] if idx < len(self.components) else ""

    @property
    def street(self) -> str:
        return self.at(0)

    @property
    def city(self) -> str:
        return self.at(1)

    @property
    def postal(self) -> str:
        return self.at(2)


# A rule returns (strategy label, candidate text) pairs in trial order.
Variation = tuple[str, str]
Rule = Callable[[AddressParts], list[Variation]]


@dataclass(frozen=True)
class CountryProfile:
    name: str
    code: str
    min_parts: int
    rules: tuple[Rule, ...]
    # names the backend may print in display_name besides the English one
    aliases: tuple[str, ...] = ()

    def detect(self, address: str) -> bool:
        return self.name.lower() in address.lower()

    def mentioned_in(self, text: str) -> bool:
        lowered = text.lower()
        return any(n.lower() in lowered for n in (self.name, *self.aliases))

    def variations(self, address: str) -> list[Variation]:
        parts = AddressParts.parse(address)
        if len(parts) < self.min_parts:
            return []

        out: list[Variation] = []
        for rule in self.rules:
            produced = rule(parts)
            for label, _ in produced:
                log.debug("%s rule %s applied", self.name, label)
            out.extend(produced)
        return out


# -----------------------
# Belgium
# -----------------------
def _belgian_strip_admin(p: AddressParts) -> list[Variation]:
    # Street, City, Postal, District, Province, Belgium -> Street, City, Postal, Belgium
    return [("belgian_strip_admin", f"{p.street}, {p.city}, {p.postal}, Belgium")]


def _belgian_postal_format(p: AddressParts) -> list[Variation]:
    if not _POSTAL4.match(p.postal):
        return []
    return [("belgian_postal_format", f"{p.street}, {p.postal} {p.city}, Belgium")]


def _belgian_street_city(p: AddressParts) -> list[Variation]:
    return [("belgian_street_city", f"{p.street}, {p.city}, Belgium")]


def _belgian_city_only(p: AddressParts) -> list[Variation]:
    return [("belgian_city_only", f"{p.city}, Belgium")]


# -----------------------
# Luxembourg
# -----------------------
def _is_lux_region(component: str) -> bool:
    c = component.lower()
    return c in LUXEMBOURG_REGIONS or c.startswith("canton ")


def _luxembourg_dedup_city(p: AddressParts) -> list[Variation]:
    """
    The scraper repeats the locality in the region field:
    "1 A Laangert, Bertrange, 8117, Bertrange, Centre, Luxembourg".
    """
    city = p.city.lower()
    occurrences = sum(1 for c in p.components if c.lower() == city)
    if occurrences < 2 or not _POSTAL4.match(p.postal):
        return []
    return [
        ("luxembourg_dedup_city", f"{p.street}, {p.city}, {p.postal}, Luxembourg"),
        ("luxembourg_dedup_postal_format", f"{p.street}, {p.postal} {p.city}, Luxembourg"),
    ]


def _luxembourg_strip_region(p: AddressParts) -> list[Variation]:
    kept = p.components[:2] + [c for c in p.components[2:] if not _is_lux_region(c)]
    if len(kept) == len(p.components) or len(kept) < 3:
        return []

    reduced = AddressParts(components=kept)
    if not _POSTAL4.match(reduced.postal):
        return []
    return [("luxembourg_strip_region", f"{reduced.street}, {reduced.city}, {reduced.postal}, Luxembourg")]


def _luxembourg_standard(p: AddressParts) -> list[Variation]:
    if _POSTAL4.match(p.postal):
        return [
            ("luxembourg_standard", f"{p.street}, {p.city}, {p.postal}, Luxembourg"),
            ("luxembourg_postal_format", f"{p.street}, {p.postal} {p.city}, Luxembourg"),
        ]
    return [("luxembourg_standard", f"{p.street}, {p.city}, Luxembourg")]


def _luxembourg_city_only(p: AddressParts) -> list[Variation]:
    if len(p) <= 5:
        return []
    return [("luxembourg_city_only", f"{p.city}, Luxembourg")]


# -----------------------
# Germany / France
# -----------------------
def _strip_admin(prefix: str, country: str) -> Rule:
    def rule(p: AddressParts) -> list[Variation]:
        return [(f"{prefix}_strip_admin", f"{p.street}, {p.city}, {country}")]

    return rule


def _postal_format(prefix: str, country: str, pattern: re.Pattern[str]) -> Rule:
    def rule(p: AddressParts) -> list[Variation]:
        if not pattern.match(p.postal):
            return []
        return [(f"{prefix}_postal_format", f"{p.street}, {p.postal} {p.city}, {country}")]

    return rule


BELGIUM = CountryProfile(
    name="Belgium",
    code="be",
    min_parts=5,
    rules=(_belgian_strip_admin, _belgian_postal_format, _belgian_street_city, _belgian_city_only),
    aliases=("Belgique", "België", "Belgien"),
)

LUXEMBOURG = CountryProfile(
    name="Luxembourg",
    code="lu",
    min_parts=4,
    rules=(_luxembourg_dedup_city, _luxembourg_strip_region, _luxembourg_standard, _luxembourg_city_only),
    aliases=("Lëtzebuerg", "Luxemburg"),
)

GERMANY = CountryProfile(
    name="Germany",
    code="de",
    min_parts=4,
    rules=(_strip_admin("german", "Germany"), _postal_format("german", "Germany", _POSTAL5)),
    aliases=("Deutschland",),
)

FRANCE = CountryProfile(
    name="France",
    code="fr",
    min_parts=4,
    rules=(_strip_admin("french", "France"), _postal_format("french", "France", _POSTAL5)),
)

COUNTRY_PROFILES: tuple[CountryProfile, ...] = (BELGIUM, LUXEMBOURG, GERMANY, FRANCE)

ALL_COUNTRY_CODES = ",".join(p.code for p in COUNTRY_PROFILES)


def detect_countries(address: str) -> list[CountryProfile]:
    return [p for p in COUNTRY_PROFILES if p.detect(address)]


def profile_for_code(code: str) -> CountryProfile | None:
    code = code.strip().lower()
    for p in COUNTRY_PROFILES:
        if p.code == code:
            return p
    return None


def country_filter_for(address: str) -> str:
    """
    ISO country filter for the backend, derived from the original address.

    The trailing component is the country field when the scraper filled it,
    so it settles cases like "Province-de-Luxembourg, Belgium". Without it,
    a single detected country wins; anything else searches all of them.
    """
    parts = split_components(address)
    last = parts[-1].lower() if parts else ""
    for p in COUNTRY_PROFILES:
        if last == p.name.lower():
            return p.code

    detected = detect_countries(address)
    if len(detected) == 1:
        return detected[0].code
    return ALL_COUNTRY_CODES
