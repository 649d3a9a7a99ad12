"""Data models for the UVCI parser.

This module provides the immutable dataclasses passed between the parsing
steps: the structural split produced by the grammar parser, the vaccination
statistics reference table, and the final parsed record.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

from .enums import ChecksumVerification, SchemaOption


@dataclass(frozen=True)
class StructuralFields:
    """Fields split out of a raw UVCI by the grammar parser.

    Fields
    ------
    normalized : str
        Uppercased identifier with the ``URN:UVCI:`` prefix and the ``#``
        suffix removed, e.g. ``01:SE:EHM/V12916227TFJJ``. This is the text
        the check character is computed over.
    version : int
        Schema version ("01" -> 1).
    country : str
        Two-letter country code.
    issuing_entity : str
        Token between the country and the first ``/``.
    payload : str
        Everything after the first ``/`` up to ``#`` or end of string.
    schema_option : SchemaOption
        Payload grammar selected by structural inspection.
    vaccine_id : str
        Vaccine segment for schema options 1 and 2, else empty.
    opaque_unique_string : str
        Identifier remainder for option 1, full payload for option 3, else
        empty.
    checksum : str
        Character after ``#``, or empty when the input had no suffix.
    """

    normalized: str
    version: int
    country: str
    issuing_entity: str
    payload: str
    schema_option: SchemaOption
    vaccine_id: str = ""
    opaque_unique_string: str = ""
    checksum: str = ""


@dataclass(frozen=True)
class StatisticsEntry:
    """One week of the vaccination statistics table."""

    week_ending: date
    cumulative_doses: int


@dataclass(frozen=True)
class VaccinationStatisticsTable:
    """Weekly cumulative vaccination counts for one issuing country.

    Entries are ordered by ``week_ending`` and non-decreasing in
    ``cumulative_doses``; ``load_statistics_table`` rejects any dataset that
    is not. The table is read-only for the lifetime of the process.

    Parameters
    ----------
    entries : Tuple[StatisticsEntry, ...]
        Weekly rows, oldest first.
    source : Optional[str]
        Where the table was loaded from (for logging and audit trail).
    """

    entries: Tuple[StatisticsEntry, ...] = ()
    source: Optional[str] = None
    _counts: Tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_counts", tuple(entry.cumulative_doses for entry in self.entries)
        )

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def max_cumulative_doses(self) -> int:
        return self._counts[-1] if self._counts else 0

    def find_week(self, doses: int) -> Optional[StatisticsEntry]:
        """Return the earliest week whose cumulative count reaches ``doses``.

        Parameters
        ----------
        doses : int
            Non-negative running dose count.

        Returns
        -------
        StatisticsEntry or None
            None when the table is empty or ``doses`` exceeds the last
            cumulative count.
        """
        if doses < 0 or self.is_empty or doses > self.max_cumulative_doses:
            return None
        return self.entries[bisect_left(self._counts, doses)]


@dataclass(frozen=True)
class UVCIRecord:
    """Parsed and verified UVCI, produced once per input string.

    Fields
    ------
    version : int
        Schema version of the UVCI format.
    country : str
        ISO 3166-1 alpha-2 code of the issuing country.
    schema_option : SchemaOption
        Payload grammar; ``schema_option_number`` and ``schema_option_desc``
        are derived from it.
    issuing_entity : str
        Authority issuing the certificate (not validated).
    vaccine_id : str
        Vaccine product / lot segment for schema options 1 and 2.
    opaque_unique_string : str
        Opaque payload (option 3) or identifier remainder (option 1).
    opaque_id : str
        Leading identifier segment of an option 3 payload.
    opaque_issuance : str
        Issuance suffix following ``opaque_id``.
    opaque_vaccination_month : int
        Estimated month (1-12), 0 when not inferable.
    opaque_vaccination_year : int
        Estimated year, 0 when not inferable.
    checksum : str
        Check character from the input, empty if absent.
    checksum_verification : ChecksumVerification
        VERIFIED, MISMATCHED or NOT_APPLICABLE.
    """

    version: int
    country: str
    schema_option: SchemaOption
    issuing_entity: str
    vaccine_id: str = ""
    opaque_unique_string: str = ""
    opaque_id: str = ""
    opaque_issuance: str = ""
    opaque_vaccination_month: int = 0
    opaque_vaccination_year: int = 0
    checksum: str = ""
    checksum_verification: ChecksumVerification = ChecksumVerification.NOT_APPLICABLE

    @property
    def schema_option_number(self) -> int:
        return self.schema_option.number

    @property
    def schema_option_desc(self) -> str:
        return self.schema_option.description

    @property
    def has_vaccination_date(self) -> bool:
        return self.opaque_vaccination_month != 0 and self.opaque_vaccination_year != 0
