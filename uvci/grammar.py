"""Structural parsing of UVCI strings.

Splits a raw identifier into version, country, issuing entity, payload and
optional check character, and selects the payload grammar (schema option).

**Grammar:**

    [URN:UVCI:]<version>:<country>:<issuer>/<payload>[#<checksum>]

**Payload dispatch** (first match wins):

1. payload contains a second ``/``: ``<vaccine_id>/<identifier>``
   (identifier with semantics)
2. payload starts with two letters and two digits followed by alphanumerics:
   vaccine id is the fixed four-character prefix (semantics)
3. anything else: the whole payload is an opaque unique string

**Error Handling:**
- Empty input, overlong input, non-ASCII characters, a version outside
  01-99, a bad country width or a missing ``/`` raise ``MalformedStructure``
- A ``#`` suffix that is not exactly one character raises
  ``InvalidChecksumCharacter``
- Unrecognized payload shapes never fail; they fall through to option 3
"""

from __future__ import annotations

import re

from .data_models import StructuralFields
from .enums import SchemaOption
from .errors import InvalidChecksumCharacter, MalformedStructure

URN_PREFIX = "URN:UVCI:"
DEFAULT_MAX_LENGTH = 72

CHECKSUM_SEPARATOR = "#"

SKELETON_PATTERN = re.compile(
    r"^(?P<version>(?!00)[0-9]{2}):(?P<country>[A-Z]{2}):(?P<issuer>[^/]+)/(?P<payload>.+)$"
)
SEMANTIC_PAYLOAD_PATTERN = re.compile(r"^(?P<vaccine_id>[A-Z]{2}[0-9]{2})[A-Z0-9]+$")


def normalize(raw: str) -> str:
    """Trim, uppercase and strip the optional ``URN:UVCI:`` prefix.

    Examples
    --------
    >>> normalize("urn:uvci:01:se:ehm/v12982924yqmv#t")
    '01:SE:EHM/V12982924YQMV#T'
    """
    text = raw.strip().upper()
    if text.startswith(URN_PREFIX):
        text = text[len(URN_PREFIX):]
    return text


def split_checksum(raw: str, text: str) -> tuple[str, str]:
    """Split ``text`` at the first ``#`` into (body, checksum).

    Raises
    ------
    InvalidChecksumCharacter
        If a ``#`` is present but not followed by exactly one character.
    """
    body, separator, checksum = text.partition(CHECKSUM_SEPARATOR)
    if separator and len(checksum) != 1:
        raise InvalidChecksumCharacter(
            raw, f"Expected a single check character after '#', got {checksum!r}"
        )
    return body, checksum


def classify_payload(payload: str) -> tuple[SchemaOption, str, str]:
    """Select the schema option for ``payload``.

    Returns
    -------
    tuple[SchemaOption, str, str]
        (schema option, vaccine_id, opaque_unique_string)
    """
    vaccine_id, separator, identifier = payload.partition("/")
    if separator and vaccine_id and identifier:
        return SchemaOption.IDENTIFIER_WITH_SEMANTICS, vaccine_id, identifier

    match = SEMANTIC_PAYLOAD_PATTERN.match(payload)
    if match:
        return SchemaOption.SEMANTICS, match.group("vaccine_id"), ""

    return SchemaOption.OPAQUE_UNIQUE_STRING, "", payload


def parse_structure(raw: str, max_length: int = DEFAULT_MAX_LENGTH) -> StructuralFields:
    """Split a raw UVCI into its canonical fields.

    Parameters
    ----------
    raw : str
        Candidate identifier, with or without the ``URN:UVCI:`` prefix, in
        any letter case.
    max_length : int, optional
        Longest accepted raw input (default: 72, the guidelines' limit).

    Returns
    -------
    StructuralFields
        Normalized structural split, including the schema option.

    Raises
    ------
    MalformedStructure
        If the mandatory skeleton is not met.
    InvalidChecksumCharacter
        If the ``#`` suffix is malformed.
    """
    if len(raw.strip()) > max_length:
        raise MalformedStructure(
            raw, f"UVCI exceeds the maximum length of {max_length} characters"
        )
    if not raw.isascii():
        raise MalformedStructure(raw, "UVCI must contain only ASCII characters")

    text = normalize(raw)
    if not text:
        raise MalformedStructure(raw, "Empty UVCI")

    body, checksum = split_checksum(raw, text)

    match = SKELETON_PATTERN.match(body)
    if not match:
        raise MalformedStructure(
            raw,
            "Expected <version:01-99>:<country:2 letters>:<issuer>/<payload>",
        )

    payload = match.group("payload")
    schema_option, vaccine_id, opaque_unique_string = classify_payload(payload)

    return StructuralFields(
        normalized=body,
        version=int(match.group("version")),
        country=match.group("country"),
        issuing_entity=match.group("issuer"),
        payload=payload,
        schema_option=schema_option,
        vaccine_id=vaccine_id,
        opaque_unique_string=opaque_unique_string,
        checksum=checksum,
    )
