"""UVCI parser facade.

Runs the parsing steps in order for one identifier:

1. ``grammar.parse_structure``: structural split and schema option
2. ``checksum``: verify the optional check character
3. ``opaque.decode``: split opaque payloads (schema option 3 only)
4. ``vaccination_dates.estimate``: approximate vaccination month for the
   supported country

``ParseError`` from steps 1 and 2 propagates unchanged. Steps 3 and 4 are
total and never fail a record. A ``UVCIParser`` holds only immutable state
and may be shared between callers.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from . import grammar, opaque, vaccination_dates
from .checksum import get_engine
from .config_loader import resolve_path
from .data_models import UVCIRecord, VaccinationStatisticsTable
from .enums import (
    ChecksumAlgorithm,
    ChecksumVerification,
    InvalidTableBehavior,
)


class UVCIParser:
    """Parse and verify UVCI strings into ``UVCIRecord`` values.

    Parameters
    ----------
    table : VaccinationStatisticsTable, optional
        Cumulative dose counts for ``supported_country``. Without a table no
        vaccination dates are estimated.
    checksum_algorithm : ChecksumAlgorithm
        Algorithm used to verify ``#<char>`` suffixes.
    supported_country : str
        Country whose opaque identifiers are sequential dose counts.
    max_length : int
        Longest accepted raw identifier.
    """

    def __init__(
        self,
        table: Optional[VaccinationStatisticsTable] = None,
        checksum_algorithm: ChecksumAlgorithm = ChecksumAlgorithm.LUHN_MOD_N,
        supported_country: str = vaccination_dates.SUPPORTED_COUNTRY,
        max_length: int = grammar.DEFAULT_MAX_LENGTH,
    ) -> None:
        self.table = table if table is not None else VaccinationStatisticsTable()
        self.checksum_algorithm = checksum_algorithm
        self.supported_country = supported_country.upper()
        self.max_length = max_length
        self._engine = get_engine(checksum_algorithm)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "UVCIParser":
        """Build a parser from a validated parameters.yaml dictionary.

        Loads the statistics table when estimation is enabled.

        Raises
        ------
        FileNotFoundError
            If the configured statistics file does not exist.
        ValueError
            If the statistics file is invalid.
        """
        estimation_config = config.get("estimation", {})
        table = None
        if estimation_config.get("enabled", True):
            statistics_file = estimation_config.get("statistics_file")
            table = vaccination_dates.load_statistics_table(
                resolve_path(statistics_file) if statistics_file else None,
                on_invalid=InvalidTableBehavior.from_string(
                    estimation_config.get("on_invalid_table")
                ),
            )

        return cls(
            table=table,
            checksum_algorithm=ChecksumAlgorithm.from_string(
                config.get("checksum", {}).get("algorithm")
            ),
            supported_country=estimation_config.get(
                "country", vaccination_dates.SUPPORTED_COUNTRY
            ),
            max_length=config.get("uvci", {}).get("max_length", grammar.DEFAULT_MAX_LENGTH),
        )

    def verify_checksum(self, normalized: str, candidate: str) -> ChecksumVerification:
        """Verify ``candidate`` over the normalized identifier.

        Raises
        ------
        InvalidChecksumCharacter
            If ``candidate`` is not a symbol of the check alphabet.
        """
        if not candidate:
            return ChecksumVerification.NOT_APPLICABLE
        verified = self._engine.verify(self._engine.checksum_input(normalized), candidate)
        return ChecksumVerification.from_result(candidate, verified)

    def parse(self, raw: str) -> UVCIRecord:
        """Parse one UVCI string.

        Parameters
        ----------
        raw : str
            Candidate identifier, e.g. "URN:UVCI:01:SE:EHM/V12916227TFJJ#Q".

        Returns
        -------
        UVCIRecord
            Immutable parsed record.

        Raises
        ------
        MalformedStructure
            If the identifier skeleton is invalid.
        InvalidChecksumCharacter
            If the ``#`` suffix is not a valid check symbol.
        """
        fields = grammar.parse_structure(raw, max_length=self.max_length)
        verification = self.verify_checksum(fields.normalized, fields.checksum)

        opaque_id = opaque_issuance = ""
        month = year = 0
        if not fields.schema_option.has_vaccine_semantics:
            opaque_id, opaque_issuance = opaque.decode(fields.opaque_unique_string)
            if opaque_id:
                month, year = vaccination_dates.estimate(
                    fields.country,
                    opaque_id,
                    self.table,
                    supported_country=self.supported_country,
                )

        return UVCIRecord(
            version=fields.version,
            country=fields.country,
            schema_option=fields.schema_option,
            issuing_entity=fields.issuing_entity,
            vaccine_id=fields.vaccine_id,
            opaque_unique_string=fields.opaque_unique_string,
            opaque_id=opaque_id,
            opaque_issuance=opaque_issuance,
            opaque_vaccination_month=month,
            opaque_vaccination_year=year,
            checksum=fields.checksum,
            checksum_verification=verification,
        )
