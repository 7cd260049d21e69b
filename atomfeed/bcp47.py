"""
BCP 47 (RFC 5646) language tag recognition.

Simplified grammar, matched subtag by subtag:

    langtag    = language ["-" script] ["-" region] *("-" variant)
                 *("-" extension) ["-" privateuse]
    language   = 2*3ALPHA *3("-" extlang) / 4ALPHA / 5*8ALPHA
    extlang    = 3ALPHA
    script     = 4ALPHA
    region     = 2ALPHA / 3DIGIT
    variant    = 5*8alphanum / (DIGIT 3alphanum)
    extension  = singleton 1*("-" (2*8alphanum))
    singleton  = DIGIT / %x41-57 / %x59-5A / %x61-77 / %x79-7A
    privateuse = "x" 1*("-" (1*8alphanum))

Tags that are private use only (``x-...``) are accepted as well.
"""

import re
from typing import List, Tuple

_LANGUAGE_SHORT = re.compile(r"[a-z]{2,3}")
_LANGUAGE_RESERVED = re.compile(r"[a-z]{4}")
_LANGUAGE_REGISTERED = re.compile(r"[a-z]{5,8}")
_EXTLANG = re.compile(r"[a-z]{3}")
_SCRIPT = re.compile(r"[a-z]{4}")
_REGION = re.compile(r"[a-z]{2}|[0-9]{3}")
_VARIANT = re.compile(r"[0-9][0-9a-z]{3}|[0-9a-z]{5,8}")
_SINGLETON = re.compile(r"[0-9a-wy-z]")
_EXTENSION_SUBTAG = re.compile(r"[0-9a-z]{2,8}")
_PRIVATE_USE_SUBTAG = re.compile(r"[0-9a-z]{1,8}")

MAX_EXTLANGS = 3
PRIVATE_USE_SINGLETON = "x"


def _matches(pattern, subtag: str) -> bool:
    return pattern.fullmatch(subtag) is not None


def _match_language(subtags: List[str]) -> Tuple[bool, int]:
    """Match the primary language subtag and any extlangs.

    Returns whether the language matched and the position after it.
    """
    primary = subtags[0]

    if _matches(_LANGUAGE_SHORT, primary):
        pos = 1
        extlangs = 0
        while pos < len(subtags) and _matches(_EXTLANG, subtags[pos]):
            extlangs += 1
            if extlangs > MAX_EXTLANGS:
                return False, pos
            pos += 1
        return True, pos

    if _matches(_LANGUAGE_RESERVED, primary) or _matches(_LANGUAGE_REGISTERED, primary):
        return True, 1

    return False, 0


def is_valid_language_tag(tag) -> bool:
    """
    Check whether ``tag`` is a structurally valid BCP 47 language tag.

    Case-insensitive. Never raises: anything that is not a non-empty string
    is simply not a valid tag.

    Args:
        tag: Candidate language tag, e.g. ``"zh-Hans-CN"``

    Returns:
        True if every subtag is consumed by the grammar
    """
    if not isinstance(tag, str) or not tag:
        return False

    subtags = tag.lower().split("-")

    if subtags[0] == PRIVATE_USE_SINGLETON:
        if len(subtags) < 2:
            return False
        return all(_matches(_PRIVATE_USE_SUBTAG, subtag) for subtag in subtags[1:])

    matched, pos = _match_language(subtags)
    if not matched:
        return False

    if pos < len(subtags) and _matches(_SCRIPT, subtags[pos]):
        pos += 1

    if pos < len(subtags) and _matches(_REGION, subtags[pos]):
        pos += 1

    while pos < len(subtags) and _matches(_VARIANT, subtags[pos]):
        pos += 1

    while pos < len(subtags) and _matches(_SINGLETON, subtags[pos]):
        pos += 1
        # A singleton needs at least one extension subtag
        if pos >= len(subtags) or not _matches(_EXTENSION_SUBTAG, subtags[pos]):
            return False
        pos += 1
        while pos < len(subtags) and _matches(_EXTENSION_SUBTAG, subtags[pos]):
            pos += 1

    if pos < len(subtags) and subtags[pos] == PRIVATE_USE_SINGLETON:
        pos += 1
        if pos >= len(subtags):
            return False
        while pos < len(subtags) and _matches(_PRIVATE_USE_SUBTAG, subtags[pos]):
            pos += 1

    return pos == len(subtags)
