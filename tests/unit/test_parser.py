"""Unit tests for parser module - the UVCIParser facade.

Tests cover:
- End-to-end parsing of Swedish, Dutch, French and Italian identifiers
- Checksum tri-state (verified, mismatched, not applicable)
- Date estimation only for opaque payloads of the supported country
- Propagation of ParseError from the grammar and checksum steps
- Construction from configuration

Real-world significance:
- This is the single entry point used by the batch driver and by library
  callers; each record must be correct on its own
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest

from tests.fixtures.sample_input import (
    MALFORMED_UVCIS,
    SWEDISH_MISMATCHED_UVCIS,
    SWEDISH_VALID_UVCIS,
)
from uvci.enums import ChecksumAlgorithm, ChecksumVerification, SchemaOption
from uvci.errors import InvalidChecksumCharacter, MalformedStructure, ParseError
from uvci.parser import UVCIParser


@pytest.mark.unit
class TestParse:
    """Unit tests for UVCIParser.parse."""

    def test_swedish_opaque_identifier(self, shipped_parser: UVCIParser) -> None:
        """Verify every field of a published Swedish certificate id.

        Real-world significance:
        - Opaque Swedish ids carry a dose sequence number and a reissue code
        """
        record = shipped_parser.parse("URN:UVCI:01:SE:EHM/V12916227TFJJ#Q")

        assert record.version == 1
        assert record.country == "SE"
        assert record.schema_option_number == 3
        assert record.schema_option_desc == "opaque unique string"
        assert record.issuing_entity == "EHM"
        assert record.vaccine_id == ""
        assert record.opaque_unique_string == "V12916227TFJJ"
        assert record.opaque_id == "V12916227"
        assert record.opaque_issuance == "TFJJ"
        assert record.opaque_vaccination_month == 8
        assert record.opaque_vaccination_year == 2021
        assert record.checksum == "Q"
        assert record.checksum_verification is ChecksumVerification.VERIFIED

    def test_identifier_with_semantics(self, shipped_parser: UVCIParser) -> None:
        record = shipped_parser.parse("URN:UVCI:01:SE:EHM/C878/123456789ABC#B")

        assert record.schema_option_number == 1
        assert record.schema_option_desc == "identifier with semantics"
        assert record.vaccine_id == "C878"
        assert record.opaque_unique_string == "123456789ABC"
        assert record.opaque_id == ""
        assert record.opaque_issuance == ""
        assert record.opaque_vaccination_month == 0
        assert record.opaque_vaccination_year == 0
        assert record.checksum_verification is ChecksumVerification.VERIFIED

    def test_semantics_without_identifier(self, shipped_parser: UVCIParser) -> None:
        record = shipped_parser.parse("URN:UVCI:01:SE:EHM/AB12CDE345#S")

        assert record.schema_option is SchemaOption.SEMANTICS
        assert record.schema_option_desc == "semantics"
        assert record.vaccine_id == "AB12"
        assert record.opaque_unique_string == ""
        assert record.has_vaccination_date is False
        assert record.checksum_verification is ChecksumVerification.VERIFIED

    @pytest.mark.parametrize(
        "uvci",
        ["URN:UVCI:01:SE:EHM/C878/12916227TFJJ", "URN:UVCI:01:SE:EHM/AB12916227"],
    )
    def test_vaccine_payloads_are_not_dated(
        self, shipped_parser: UVCIParser, uvci: str
    ) -> None:
        """Verify payloads naming a vaccine are never read as Swedish ids.

        Real-world significance:
        - Only opaque payloads carry the sequential identifier the dose
          statistics are indexed by
        """
        record = shipped_parser.parse(uvci)

        assert record.schema_option.has_vaccine_semantics
        assert record.opaque_id == ""
        assert record.has_vaccination_date is False

    def test_missing_checksum_not_applicable(self, shipped_parser: UVCIParser) -> None:
        record = shipped_parser.parse("URN:UVCI:01:SE:EHM/V12916227TFJJ")

        assert record.checksum == ""
        assert record.checksum_verification is ChecksumVerification.NOT_APPLICABLE
        assert record.checksum_verification.as_bool() is None

    def test_missing_slash_raises(self, shipped_parser: UVCIParser) -> None:
        with pytest.raises(MalformedStructure):
            shipped_parser.parse("URN:UVCI:01:SE:123456789ABC")

    def test_non_ascii_input_raises(self, shipped_parser: UVCIParser) -> None:
        with pytest.raises(MalformedStructure):
            shipped_parser.parse("urn:uvci:01:se:ehm/v12916227tfjj#ß")

    def test_version_zero_raises(self, shipped_parser: UVCIParser) -> None:
        with pytest.raises(MalformedStructure):
            shipped_parser.parse("URN:UVCI:00:SE:EHM/V12916227TFJJ")

    def test_unsupported_country_decoded_but_not_dated(
        self, shipped_parser: UVCIParser
    ) -> None:
        """Verify opaque payloads of other countries are split but not dated.

        Real-world significance:
        - Only Swedish numbers follow the national dose count
        """
        record = shipped_parser.parse("URN:UVCI:01:FR:AP/A12345678QWER")

        assert record.schema_option_number == 3
        assert record.opaque_id == "A12345678"
        assert record.opaque_issuance == "QWER"
        assert record.opaque_vaccination_month == 0
        assert record.opaque_vaccination_year == 0

    def test_dutch_numeric_identifier(self, shipped_parser: UVCIParser) -> None:
        record = shipped_parser.parse("URN:UVCI:01:NL:187/37512422923")

        assert record.issuing_entity == "187"
        assert record.opaque_id == "37512422923"
        assert record.opaque_issuance == ""
        assert record.has_vaccination_date is False

    @pytest.mark.parametrize("uvci", SWEDISH_VALID_UVCIS)
    def test_published_ids_verify(self, shipped_parser: UVCIParser, uvci: str) -> None:
        record = shipped_parser.parse(uvci)

        assert record.checksum_verification is ChecksumVerification.VERIFIED
        assert record.opaque_vaccination_month == 8
        assert record.opaque_vaccination_year == 2021

    @pytest.mark.parametrize("uvci", SWEDISH_MISMATCHED_UVCIS)
    def test_wrong_check_character_is_a_record(
        self, shipped_parser: UVCIParser, uvci: str
    ) -> None:
        """Verify a wrong check character is reported, not raised.

        Real-world significance:
        - Operators need the decoded fields even when the id was mistyped
        """
        record = shipped_parser.parse(uvci)

        assert record.checksum_verification is ChecksumVerification.MISMATCHED
        assert record.checksum_verification.as_bool() is False

    def test_lowercase_input(self, shipped_parser: UVCIParser) -> None:
        record = shipped_parser.parse("urn:uvci:01:se:ehm/v12982924yqmv#t")

        assert record.country == "SE"
        assert record.opaque_id == "V12982924"
        assert record.checksum == "T"
        assert record.checksum_verification is ChecksumVerification.VERIFIED

    def test_unprefixed_input_verifies(self, shipped_parser: UVCIParser) -> None:
        record = shipped_parser.parse("01:SE:EHM/C878/123456789ABC#B")

        assert record.checksum_verification is ChecksumVerification.VERIFIED

    def test_changed_version_mismatches(self, shipped_parser: UVCIParser) -> None:
        record = shipped_parser.parse("urn:uvci:98:se:ehm/v12982924yqmv#t")

        assert record.version == 98
        assert record.checksum_verification is ChecksumVerification.MISMATCHED

    def test_invalid_check_character_raises(self, shipped_parser: UVCIParser) -> None:
        with pytest.raises(InvalidChecksumCharacter):
            shipped_parser.parse("URN:UVCI:01:SE:EHM/V12916227TFJJ#*")

    @pytest.mark.parametrize("uvci", MALFORMED_UVCIS)
    def test_malformed_inputs_raise(self, shipped_parser: UVCIParser, uvci: str) -> None:
        with pytest.raises(ParseError):
            shipped_parser.parse(uvci)

    def test_without_table_no_dates(self) -> None:
        record = UVCIParser().parse("URN:UVCI:01:SE:EHM/V12916227TFJJ#Q")

        assert record.opaque_id == "V12916227"
        assert record.has_vaccination_date is False

    def test_iso_algorithm(self) -> None:
        parser = UVCIParser(checksum_algorithm=ChecksumAlgorithm.ISO7064_MOD_37_36)

        assert (
            parser.parse("URN:UVCI:01:SE:EHM/V12916227TFJJ#F").checksum_verification
            is ChecksumVerification.VERIFIED
        )
        assert (
            parser.parse("URN:UVCI:01:SE:EHM/V12916227TFJJ#Q").checksum_verification
            is ChecksumVerification.MISMATCHED
        )

    def test_parse_is_deterministic(self, shipped_parser: UVCIParser) -> None:
        raw = "URN:UVCI:01:SE:EHM/V12998404MNQF#6"

        assert shipped_parser.parse(raw) == shipped_parser.parse(raw)


@pytest.mark.unit
class TestFromConfig:
    """Unit tests for UVCIParser.from_config."""

    def test_default_config(self, default_config: Dict[str, Any]) -> None:
        parser = UVCIParser.from_config(default_config)

        assert parser.checksum_algorithm is ChecksumAlgorithm.LUHN_MOD_N
        assert parser.supported_country == "SE"
        assert parser.max_length == 72
        assert len(parser.table) == 66

    def test_estimation_disabled(self, default_config: Dict[str, Any]) -> None:
        default_config["estimation"] = {"enabled": False}

        parser = UVCIParser.from_config(default_config)

        assert parser.table.is_empty
        assert parser.parse("URN:UVCI:01:SE:EHM/V12916227TFJJ").has_vaccination_date is False

    def test_custom_statistics_file(
        self, default_config: Dict[str, Any], statistics_csv: Path
    ) -> None:
        default_config["estimation"]["statistics_file"] = str(statistics_csv)

        parser = UVCIParser.from_config(default_config)
        record = parser.parse("URN:UVCI:01:SE:EHM/V1000ABCD")

        assert (record.opaque_vaccination_month, record.opaque_vaccination_year) == (1, 2021)

    def test_missing_statistics_file_raises(
        self, default_config: Dict[str, Any], tmp_test_dir: Path
    ) -> None:
        default_config["estimation"]["statistics_file"] = str(tmp_test_dir / "none.csv")

        with pytest.raises(FileNotFoundError):
            UVCIParser.from_config(default_config)

    def test_checksum_algorithm_and_length(self, default_config: Dict[str, Any]) -> None:
        default_config["checksum"]["algorithm"] = "iso7064_mod_37_36"
        default_config["uvci"]["max_length"] = 30

        parser = UVCIParser.from_config(default_config)

        assert parser.checksum_algorithm is ChecksumAlgorithm.ISO7064_MOD_37_36
        with pytest.raises(MalformedStructure):
            parser.parse("URN:UVCI:01:SE:EHM/V12916227TFJJ#F")

    def test_empty_config_uses_defaults(self) -> None:
        parser = UVCIParser.from_config({})

        assert parser.checksum_algorithm is ChecksumAlgorithm.LUHN_MOD_N
        assert not parser.table.is_empty
