from __future__ import annotations

import re
import unicodedata


REPLACEMENT_CHAR = "\ufffd"

_WS = re.compile(r"\s+")
_COMBINING = re.compile("[\u0300-\u036f]")
_NON_ASCII = re.compile("[^\x00-\x7f]")
_NON_ASCII_KEEP_MARKER = re.compile("[^\x00-\x7f\ufffd]")

# Characters NFD leaves alone (or that some feeds deliver precomposed).
_FALLBACKS = {
    "ß": "ss",
    "ẞ": "SS",
    "æ": "ae",
    "Æ": "AE",
    "œ": "oe",
    "Œ": "OE",
    "ø": "o",
    "Ø": "O",
    "đ": "d",
    "Đ": "D",
    "ł": "l",
    "Ł": "L",
    "ñ": "n",
    "Ñ": "N",
    "ç": "c",
    "Ç": "C",
}
_FALLBACK_TABLE = str.maketrans(_FALLBACKS)


def normalize_query(q: str) -> str:
    q = q.strip()
    q = _WS.sub(" ", q)
    return q


def normalize_text(raw: str, *, preserve_replacement: bool = False) -> str:
    """
    Fold an address into plain ASCII.

    Accents are decomposed and dropped, non-decomposing letters go through
    the fallback table. With ``preserve_replacement`` the U+FFFD marker
    survives so the corruption site can be repaired later; every other
    non-ASCII character is removed in both modes.
    """
    if not raw:
        return ""

    text = unicodedata.normalize("NFD", raw)
    text = _COMBINING.sub("", text)
    text = text.translate(_FALLBACK_TABLE)

    if preserve_replacement:
        text = _NON_ASCII_KEEP_MARKER.sub("", text)
    else:
        text = _NON_ASCII.sub("", text)

    return normalize_query(text)


def split_components(address: str) -> list[str]:
    return [part.strip() for part in address.split(",")]


def join_components(parts: list[str]) -> str:
    return ", ".join(parts)


def has_marker(text: str) -> bool:
    return REPLACEMENT_CHAR in text
