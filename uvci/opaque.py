"""Decomposition of opaque unique strings (schema option 3).

The identifier segment is the leading run of digits, optionally preceded by
a single letter; whatever follows is the issuance segment. The split is
advisory: a payload without a leading digit run is a valid outcome and
yields two empty segments.
"""

from __future__ import annotations

import re
from typing import Tuple

OPAQUE_PATTERN = re.compile(r"^(?P<id>[A-Z]?[0-9]+)(?P<issuance>.*)$")


def decode(opaque: str) -> Tuple[str, str]:
    """Split an opaque unique string into (identifier, issuance).

    Parameters
    ----------
    opaque : str
        Normalized (uppercased) opaque payload.

    Returns
    -------
    Tuple[str, str]
        Identifier and issuance segments, or ("", "") when the string has no
        recognizable digit run.

    Examples
    --------
    >>> decode("V12916227TFJJ")
    ('V12916227', 'TFJJ')

    >>> decode("TFJJ")
    ('', '')
    """
    match = OPAQUE_PATTERN.match(opaque)
    if not match:
        return "", ""
    return match.group("id"), match.group("issuance")


def numeric_portion(opaque_id: str) -> int | None:
    """Return the digits of an identifier segment as an integer.

    The optional leading letter is dropped. Returns None when what remains
    is not a plain run of ASCII digits.

    Examples
    --------
    >>> numeric_portion("V12916227")
    12916227
    """
    digits = opaque_id[1:] if opaque_id[:1].isalpha() else opaque_id
    if not digits or not digits.isascii() or not digits.isdigit():
        return None
    return int(digits)
