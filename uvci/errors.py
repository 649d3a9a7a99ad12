"""Per-record parse errors for UVCI strings.

A ``ParseError`` is fatal for the single identifier being parsed and for
nothing else; the batch driver collects them and keeps going. A checksum that
is well formed but wrong is not an error (see ``ChecksumVerification``).
"""

from __future__ import annotations


class ParseError(ValueError):
    """Base class for UVCI strings that cannot produce a record.

    Parameters
    ----------
    uvci : str
        The raw identifier that failed to parse.
    reason : str
        Human-readable explanation, included in ``str(error)``.
    """

    def __init__(self, uvci: str, reason: str) -> None:
        self.uvci = uvci
        self.reason = reason
        super().__init__(f"{reason}: {uvci!r}")


class MalformedStructure(ParseError):
    """Raised when the version/country/issuer/payload skeleton is not met.

    This occurs when:
    - the input is empty (after stripping the ``URN:UVCI:`` prefix)
    - the input is longer than the configured maximum length
    - the input contains non-ASCII characters
    - the version is not two digits in the range 01-99
    - the country is not exactly two letters
    - the ``/`` separating issuer and payload is absent
    """


class InvalidChecksumCharacter(ParseError):
    """Raised when a ``#`` suffix is present but is not a valid check symbol."""
