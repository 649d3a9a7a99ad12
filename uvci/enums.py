"""Enumerations for the UVCI parser."""

from __future__ import annotations

from enum import Enum


class SchemaOption(Enum):
    """Payload grammar of a UVCI, per the eHealth Network guidelines.

    Each option describes how much meaning the issuer embedded in the part of
    the identifier that follows the issuing entity:

    - ``IDENTIFIER_WITH_SEMANTICS`` (1): ``<vaccine_id>/<identifier>``
    - ``SEMANTICS`` (2): single segment whose fixed-position prefix names the
      vaccine
    - ``OPAQUE_UNIQUE_STRING`` (3): no decodable semantics; the default for any
      payload shape not recognized as 1 or 2

    Attributes
    ----------
    number : int
        Option number as written in the guidelines (1, 2 or 3).
    description : str
        Human-readable label, derived from the number.
    """

    IDENTIFIER_WITH_SEMANTICS = 1
    SEMANTICS = 2
    OPAQUE_UNIQUE_STRING = 3

    @property
    def number(self) -> int:
        return self.value

    @property
    def description(self) -> str:
        return _SCHEMA_OPTION_DESCRIPTIONS[self]

    @property
    def has_vaccine_semantics(self) -> bool:
        """True for the options that carry a vaccine identifier."""
        return self is not SchemaOption.OPAQUE_UNIQUE_STRING


_SCHEMA_OPTION_DESCRIPTIONS = {
    SchemaOption.IDENTIFIER_WITH_SEMANTICS: "identifier with semantics",
    SchemaOption.SEMANTICS: "semantics",
    SchemaOption.OPAQUE_UNIQUE_STRING: "opaque unique string",
}


class ChecksumVerification(Enum):
    """Outcome of checking the optional ``#<char>`` suffix.

    A mismatch is a normal, reportable outcome and is kept apart from the
    error path; only a malformed suffix raises ``InvalidChecksumCharacter``.

    Attributes
    ----------
    VERIFIED : str
        Check character present and correct.
    MISMATCHED : str
        Check character present, valid symbol, wrong value.
    NOT_APPLICABLE : str
        Input carried no check character.
    """

    VERIFIED = "verified"
    MISMATCHED = "mismatched"
    NOT_APPLICABLE = "not_applicable"

    @classmethod
    def from_result(cls, candidate: str, verified: bool) -> "ChecksumVerification":
        """Map a (candidate, verify() result) pair to the tri-state.

        Examples
        --------
        >>> ChecksumVerification.from_result("", False)
        <ChecksumVerification.NOT_APPLICABLE: 'not_applicable'>

        >>> ChecksumVerification.from_result("Q", True)
        <ChecksumVerification.VERIFIED: 'verified'>
        """
        if not candidate:
            return cls.NOT_APPLICABLE
        return cls.VERIFIED if verified else cls.MISMATCHED

    def as_bool(self) -> bool | None:
        """Return True/False for a present check character, None otherwise."""
        if self is ChecksumVerification.NOT_APPLICABLE:
            return None
        return self is ChecksumVerification.VERIFIED


class ChecksumAlgorithm(Enum):
    """Check-character algorithm applied to the UVCI."""

    LUHN_MOD_N = "luhn_mod_n"
    ISO7064_MOD_37_36 = "iso7064_mod_37_36"

    @classmethod
    def from_string(cls, value: str | None) -> "ChecksumAlgorithm":
        """Convert string to ChecksumAlgorithm.

        Parameters
        ----------
        value : str | None
            Algorithm name ('luhn_mod_n', 'iso7064_mod_37_36'), or None for
            default (LUHN_MOD_N).

        Returns
        -------
        ChecksumAlgorithm
            Corresponding ChecksumAlgorithm enum.

        Raises
        ------
        ValueError
            If value is not a valid algorithm name.
        """
        if value is None:
            return cls.LUHN_MOD_N

        value_lower = str(value).lower()
        for algorithm in cls:
            if algorithm.value == value_lower:
                return algorithm

        raise ValueError(
            f"Unknown checksum algorithm: {value}. "
            f"Valid options: {', '.join(a.value for a in cls)}"
        )


class InvalidTableBehavior(Enum):
    """What to do when the vaccination statistics table is not monotonic."""

    WARN = "warn"
    ERROR = "error"

    @classmethod
    def from_string(cls, value: str | None) -> "InvalidTableBehavior":
        """Convert string to InvalidTableBehavior; None means WARN.

        Raises
        ------
        ValueError
            If value is not 'warn' or 'error'.
        """
        if value is None:
            return cls.WARN

        value_lower = str(value).lower()
        for behavior in cls:
            if behavior.value == value_lower:
                return behavior

        raise ValueError(
            f"Unknown invalid-table behavior: {value}. "
            f"Valid options: {', '.join(b.value for b in cls)}"
        )


class OutputFormat(Enum):
    """Rendering used by the batch driver for parsed records."""

    TEXT = "text"
    CSV = "csv"
    GRAPH = "graph"

    @classmethod
    def from_string(cls, value: str | None) -> "OutputFormat":
        """Convert string to OutputFormat; None means TEXT.

        Raises
        ------
        ValueError
            If value is not a valid output format.
        """
        if value is None:
            return cls.TEXT

        value_lower = str(value).lower()
        for fmt in cls:
            if fmt.value == value_lower:
                return fmt

        raise ValueError(
            f"Unsupported output format: {value}. "
            f"Valid options: {', '.join(f.value for f in cls)}"
        )

    @classmethod
    def all_values(cls) -> set[str]:
        """Get set of all output format names."""
        return {fmt.value for fmt in cls}
