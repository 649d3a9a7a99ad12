"""Rendering of parsed UVCI records.

Three formats are supported:

- ``text``: aligned key/value block per record
- ``csv``: one row per record, written with pandas
- ``graph``: Cypher ``CREATE`` statements linking country, issuer, opaque
  identifier, reissue and estimated vaccination month. Only records of the
  supported country with an opaque payload produce statements.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd

from .data_models import UVCIRecord

CSV_COLUMNS = [
    "version",
    "country",
    "schema_option_number",
    "schema_option_desc",
    "issuing_entity",
    "vaccine_id",
    "opaque_unique_string",
    "opaque_id",
    "opaque_issuance",
    "opaque_vaccination_month",
    "opaque_vaccination_year",
    "checksum",
    "checksum_verification",
]

_KEY_WIDTH = max(len(column) for column in CSV_COLUMNS)

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_CYPHER_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def record_to_dict(record: UVCIRecord) -> Dict[str, object]:
    """Flatten a record into CSV_COLUMNS order.

    ``checksum_verification`` becomes "true", "false" or "" (no check
    character in the input).
    """
    verified = record.checksum_verification.as_bool()
    return {
        "version": record.version,
        "country": record.country,
        "schema_option_number": record.schema_option_number,
        "schema_option_desc": record.schema_option_desc,
        "issuing_entity": record.issuing_entity,
        "vaccine_id": record.vaccine_id,
        "opaque_unique_string": record.opaque_unique_string,
        "opaque_id": record.opaque_id,
        "opaque_issuance": record.opaque_issuance,
        "opaque_vaccination_month": record.opaque_vaccination_month,
        "opaque_vaccination_year": record.opaque_vaccination_year,
        "checksum": record.checksum,
        "checksum_verification": "" if verified is None else str(verified).lower(),
    }


def to_text(record: UVCIRecord) -> str:
    """Render a record as an aligned key/value block."""
    return "".join(
        f"{key:<{_KEY_WIDTH}} : {value}\n" for key, value in record_to_dict(record).items()
    )


def records_to_frame(records: Iterable[UVCIRecord]) -> pd.DataFrame:
    """Build a DataFrame with one row per record and CSV_COLUMNS columns."""
    return pd.DataFrame([record_to_dict(r) for r in records], columns=CSV_COLUMNS)


def to_csv(records: Iterable[UVCIRecord], header: bool = True) -> str:
    """Render records as CSV text."""
    return records_to_frame(records).to_csv(index=False, header=header, lineterminator="\n")


def _month_label(month: int, year: int) -> str:
    if not 1 <= month <= 12:
        return f"Unknown {year}"
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _variable(name: str) -> str:
    """Return ``name`` as a Cypher variable, backtick-quoted when needed."""
    if _CYPHER_IDENTIFIER.match(name):
        return name
    return "`" + name.replace("`", "``") + "`"


def to_graph(
    record: UVCIRecord,
    supported_country: str = "SE",
    country_name: Optional[str] = None,
    issuer_names: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """Build Cypher CREATE statements for one record.

    Parameters
    ----------
    record : UVCIRecord
        Parsed record.
    supported_country : str
        Only records from this country are rendered.
    country_name : str, optional
        Display name of the country node (defaults to the country code).
    issuer_names : Mapping[str, str], optional
        Display names of issuing entities, keyed by code.

    Returns
    -------
    List[str]
        Statements, or an empty list for records that are not rendered
        (other countries, non-opaque payloads, undecodable identifiers).
    """
    if (
        record.country != supported_country
        or record.schema_option.has_vaccine_semantics
        or not record.opaque_id
    ):
        return []

    issuer_names = issuer_names or {}
    country = _variable(record.country)
    issuer = _variable(record.issuing_entity)
    opaque_id = _variable(record.opaque_id)
    reissue = _variable(record.opaque_unique_string)
    date_node = f"d{record.opaque_vaccination_year}{record.opaque_vaccination_month}"
    date_label = _month_label(record.opaque_vaccination_month, record.opaque_vaccination_year)
    issuer_name = issuer_names.get(record.issuing_entity, record.issuing_entity)

    statements = [
        f"CREATE ({country}:country {{name:'{_quote(country_name or record.country)}'}})"
        f"-[:COUNTRY_OF {{}}]->"
        f"({issuer}:issuing_entity {{name:'{_quote(issuer_name)}'}})",
        f"CREATE ({issuer})-[:ISSUER_OF {{}}]->"
        f"({opaque_id}:opaque_id {{name:'{_quote(record.opaque_id)}'}})",
        f"CREATE ({date_node}:vac_date {{name:'{date_label}'}})",
        f"CREATE ({date_node})-[:VAC_DATE_OF {{}}]->({opaque_id})",
    ]
    if record.opaque_issuance:
        statements.append(
            f"CREATE ({reissue}:reissue_id {{name:'{_quote(record.opaque_issuance)}'}})"
            f"-[:REISSUE_OF {{}}]->({opaque_id})"
        )
    return statements


def records_to_graph(
    records: Iterable[UVCIRecord],
    supported_country: str = "SE",
    country_name: Optional[str] = None,
    issuer_names: Optional[Mapping[str, str]] = None,
) -> str:
    """Render records as one Cypher script.

    Statements shared between records (country, issuer, month nodes) are
    emitted once, at their first occurrence. The script ends with
    ``RETURN *``.
    """
    seen = set()
    statements: List[str] = []
    for record in records:
        for statement in to_graph(record, supported_country, country_name, issuer_names):
            if statement not in seen:
                seen.add(statement)
                statements.append(statement)
    statements.append("RETURN *")
    return "\n".join(statements) + "\n"
