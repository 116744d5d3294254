from __future__ import annotations

from geocode_mcp.core.text import REPLACEMENT_CHAR

DEFAULT_SUBSTITUTIONS = ("e", "a", "u", "o", "i", "ss")
MULTI_SUBSTITUTIONS = ("u", "e", "a", "o", "i", "ss")
MAX_COMBINATIONS = 12

# wide enough to see "sur-s" right before the marker
CONTEXT_BEFORE = 5
CONTEXT_AFTER = 3

# (window markers, ranked substitutions); first match wins
_CONTEXT_RULES: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("sur-s", "ux-s"), ("u", "e", "a", "o", "i", "ss")),  # Vaux-sur-Sûre
    (("strass", "stra"), ("ss", "e", "a", "u", "o", "i")),  # Straße
    (("sch", "utr"), ("u", "o", "e", "a", "i", "ss")),
)


def marker_positions(text: str) -> list[int]:
    return [i for i, ch in enumerate(text) if ch == REPLACEMENT_CHAR]


def contextual_substitutions(text: str, position: int) -> tuple[str, ...]:
    window = text[max(0, position - CONTEXT_BEFORE) : position + CONTEXT_AFTER + 1].lower()
    for markers, subs in _CONTEXT_RULES:
        if any(m in window for m in markers):
            return subs
    return DEFAULT_SUBSTITUTIONS


def repair_variants(text: str, *, max_combinations: int = MAX_COMBINATIONS) -> list[tuple[str, str]]:
    """
    Guess the letters hidden behind U+FFFD markers.

    Returns ``(substitution label, repaired text)`` pairs, most likely first.
    A single marker is ranked by its surrounding characters. Several markers
    are enumerated like digits of a base-6 counter over a fixed alphabet,
    the last marker turning fastest, and cut at ``max_combinations``.
    """
    positions = marker_positions(text)
    if not positions:
        return []

    if len(positions) == 1:
        pos = positions[0]
        return [(sub, text[:pos] + sub + text[pos + 1 :]) for sub in contextual_substitutions(text, pos)]

    alphabet = MULTI_SUBSTITUTIONS
    total = min(len(alphabet) ** len(positions), max_combinations)

    out: list[tuple[str, str]] = []
    for n in range(total):
        chosen: list[str] = []
        temp = n
        for _ in positions:
            chosen.append(alphabet[temp % len(alphabet)])
            temp //= len(alphabet)
        chosen.reverse()

        # replace right to left so earlier offsets stay valid
        repaired = text
        for pos, sub in sorted(zip(positions, chosen), reverse=True):
            repaired = repaired[:pos] + sub + repaired[pos + 1 :]
        out.append(("+".join(chosen), repaired))

    return out
