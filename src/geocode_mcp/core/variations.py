from __future__ import annotations

import logging
import re

from geocode_mcp.core.countries import Variation, detect_countries
from geocode_mcp.core.models import Candidate
from geocode_mcp.core.repair import MAX_COMBINATIONS, repair_variants
from geocode_mcp.core.text import has_marker, join_components, normalize_text, split_components

log = logging.getLogger(__name__)

PLACEHOLDERS = frozenset(
    {
        "NC",
        "N/A",
        "TBD",
        "TBA",
        "UNKNOWN",
        "NO ADDRESS",
        "NOT SPECIFIED",
        "NA",
        "???",
        "--",
        "NULL",
        "NONE",
        "X",
        "?",
    }
)

_SHORT_CODE = re.compile(r"^[A-Z]{1,3}$")
_HOUSE_NUMBER = re.compile(r"^\d[\dA-Z\-]*$", re.IGNORECASE)


def is_placeholder(component: str) -> bool:
    return component.strip().upper() in PLACEHOLDERS


def _is_junk_prefix(component: str) -> bool:
    return is_placeholder(component) or len(component) <= 2 or bool(_SHORT_CODE.match(component))


def generic_variations(address: str) -> list[Variation]:
    """Country-agnostic cleanup: placeholder prefixes, short junk parts, split house numbers."""
    parts = split_components(address)
    if len(parts) < 2:
        return []

    out: list[Variation] = []

    if _is_junk_prefix(parts[0]):
        log.debug("Removed problematic prefix %r", parts[0])
        out.append(("strip_prefix", join_components(parts[1:])))

    cleaned = [p for p in parts if len(p) >= 3 and not is_placeholder(p)]
    if len(cleaned) != len(parts) and len(cleaned) >= 2:
        out.append(("strip_short_parts", join_components(cleaned)))

    # "12, Rue Haute, ..." -> "12 Rue Haute, ..."
    if _HOUSE_NUMBER.match(parts[0]) and parts[1]:
        merged = [f"{parts[0]} {parts[1]}"] + parts[2:]
        out.append(("merge_house_number", join_components(merged)))

    return out


class VariationGenerator:
    def __init__(self, *, max_repair_combinations: int = MAX_COMBINATIONS) -> None:
        self._max_repair_combinations = max_repair_combinations

    def generate(self, address: str) -> list[Candidate]:
        """
        Build the ordered candidate list for one address.

        Args:
            address: raw or already normalized address

        Returns:
            Candidates in trial order, the address itself first (``original``).
            Texts are ASCII, unique, and ranked 0..N-1.
        """
        normalized = normalize_text(address, preserve_replacement=True)
        if not normalized:
            return []

        structural: list[Variation] = [("original", normalized)]
        structural.extend(generic_variations(normalized))
        for profile in detect_countries(normalized):
            structural.extend(profile.variations(normalized))

        expanded: list[Variation] = []
        for label, text in structural:
            expanded.append((label, text))
            if has_marker(text):
                for sub, repaired in repair_variants(text, max_combinations=self._max_repair_combinations):
                    expanded.append((f"char_repair:{sub}", repaired))

        candidates: list[Candidate] = []
        seen: set[str] = set()
        for label, text in expanded:
            query = normalize_text(text)
            if not query or query in seen:
                continue
            seen.add(query)
            candidates.append(Candidate(text=query, strategy=label, rank=len(candidates)))

        log.debug("Generated %d candidates for %r", len(candidates), normalized)
        return candidates
