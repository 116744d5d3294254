from __future__ import annotations

from typing import Sequence

from geocode_mcp.core.countries import profile_for_code
from geocode_mcp.core.models import GeocodeResult

COUNTRY_BONUS = 0.5
CLASS_BONUS = 0.3
TYPE_BONUS = 0.2

SPECIFIC_CLASSES = frozenset({"building", "place"})
SPECIFIC_TYPES = frozenset({"house", "residential"})


def score_result(result: GeocodeResult, country_filter: str) -> float:
    score = result.importance or 0.0

    display = result.display_name or ""
    for code in country_filter.split(","):
        profile = profile_for_code(code)
        if profile is not None and profile.mentioned_in(display):
            score += COUNTRY_BONUS

    if result.place_class in SPECIFIC_CLASSES:
        score += CLASS_BONUS
    if result.place_type in SPECIFIC_TYPES:
        score += TYPE_BONUS

    return score


def select(results: Sequence[GeocodeResult], country_filter: str) -> GeocodeResult:
    """
    Pick the best of one query's results.

    A lone result is returned as is. Otherwise results are ranked by
    importance plus bonuses for naming a filtered country and for being a
    specific place; ``sorted`` is stable, so ties keep the provider order.
    """
    if not results:
        raise ValueError("select() needs at least one result")

    if len(results) == 1:
        return results[0]

    ranked = sorted(results, key=lambda r: score_result(r, country_filter), reverse=True)
    return ranked[0]
