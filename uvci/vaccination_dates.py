"""Estimate the vaccination month of an opaque UVCI identifier.

Some issuers (Sweden's E-hälsomyndigheten) number certificates
sequentially. Matching the identifier's number against the national
cumulative dose count gives the week in which that many doses had been
given, and hence an approximate vaccination month. Order within a week is
not observable, so the result is good to about one month.

**Input Contract:**
- Statistics CSV with columns ``week_ending`` (YYYY-MM-DD) and
  ``cumulative_doses`` (non-negative integers)
- Rows may be in any order; they are sorted by week

**Output Contract:**
- ``estimate`` returns (month, year), or (0, 0) when nothing can be inferred
- ``estimate`` never raises

**Error Handling:**
- Missing statistics file raises FileNotFoundError (infrastructure)
- Missing columns or unparseable values raise ValueError
- Decreasing cumulative counts: logged and the table discarded (``warn``), or
  ValueError (``error``), per ``estimation.on_invalid_table``
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import pandas as pd

from .data_models import StatisticsEntry, VaccinationStatisticsTable
from .enums import InvalidTableBehavior
from .opaque import numeric_portion

LOG = logging.getLogger(__name__)

SCRIPT_DIR = Path(__file__).resolve().parent
DEFAULT_STATISTICS_PATH = SCRIPT_DIR / "data" / "se_vaccination_statistics.csv"

SUPPORTED_COUNTRY = "SE"

WEEK_COLUMN = "week_ending"
COUNT_COLUMN = "cumulative_doses"

NO_ESTIMATE = (0, 0)


class StatisticsTableCache:
    """In-memory cache of loaded statistics tables, keyed by resolved path."""

    def __init__(self, cache_enabled: bool = True) -> None:
        self._cache: Dict[str, VaccinationStatisticsTable] = {}
        self._enabled = cache_enabled

    def get(self, path: str) -> Optional[VaccinationStatisticsTable]:
        if not self._enabled:
            return None
        return self._cache.get(path)

    def set(self, path: str, table: VaccinationStatisticsTable) -> None:
        if self._enabled:
            self._cache[path] = table

    def clear(self) -> None:
        self._cache.clear()


_STATISTICS_TABLES = StatisticsTableCache(cache_enabled=True)


def build_statistics_table(
    df: pd.DataFrame,
    source: Optional[str] = None,
    on_invalid: InvalidTableBehavior = InvalidTableBehavior.WARN,
) -> VaccinationStatisticsTable:
    """Validate a week/cumulative-count DataFrame and freeze it into a table.

    Parameters
    ----------
    df : pd.DataFrame
        Frame with ``week_ending`` and ``cumulative_doses`` columns.
    source : str, optional
        Origin of the data, for log messages.
    on_invalid : InvalidTableBehavior
        How to react to decreasing cumulative counts:
        - WARN: log an error and return an empty table
        - ERROR: raise ValueError

    Returns
    -------
    VaccinationStatisticsTable
        Table sorted by week, or an empty table if rejected under WARN.

    Raises
    ------
    ValueError
        If columns are missing, values cannot be parsed, counts are negative,
        or counts decrease and ``on_invalid`` is ERROR.
    """
    missing = [col for col in (WEEK_COLUMN, COUNT_COLUMN) if col not in df.columns]
    if missing:
        raise ValueError(
            f"Vaccination statistics missing required column(s): {', '.join(missing)}"
        )

    frame = df[[WEEK_COLUMN, COUNT_COLUMN]].dropna(how="all").copy()
    try:
        frame[WEEK_COLUMN] = pd.to_datetime(frame[WEEK_COLUMN], format="%Y-%m-%d")
        frame[COUNT_COLUMN] = pd.to_numeric(frame[COUNT_COLUMN]).astype("int64")
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Invalid vaccination statistics in {source}: {exc}") from exc

    if frame[WEEK_COLUMN].isna().any():
        raise ValueError(f"Missing week_ending value in {source}")

    if (frame[COUNT_COLUMN] < 0).any():
        raise ValueError(f"Negative cumulative dose count in {source}")

    frame = frame.sort_values(WEEK_COLUMN, kind="stable").reset_index(drop=True)

    if not frame[COUNT_COLUMN].is_monotonic_increasing:
        decreases = frame[frame[COUNT_COLUMN].diff() < 0]
        first_week = decreases[WEEK_COLUMN].iloc[0].date().isoformat()
        message = (
            f"Cumulative dose counts decrease week-over-week in {source} "
            f"(first at week ending {first_week})"
        )
        if on_invalid is InvalidTableBehavior.ERROR:
            raise ValueError(message)
        LOG.error("%s; discarding table, vaccination dates will not be estimated", message)
        return VaccinationStatisticsTable(entries=(), source=source)

    entries = tuple(
        StatisticsEntry(week_ending=week.date(), cumulative_doses=int(count))
        for week, count in zip(frame[WEEK_COLUMN], frame[COUNT_COLUMN])
    )
    return VaccinationStatisticsTable(entries=entries, source=source)


def load_statistics_table(
    path: Optional[Path] = None,
    on_invalid: InvalidTableBehavior = InvalidTableBehavior.WARN,
) -> VaccinationStatisticsTable:
    """Load the vaccination statistics CSV.

    Caches the result for subsequent calls with the same path.

    Parameters
    ----------
    path : Path, optional
        CSV path; defaults to ``data/se_vaccination_statistics.csv`` in the package
        directory.
    on_invalid : InvalidTableBehavior
        Passed to ``build_statistics_table``.

    Returns
    -------
    VaccinationStatisticsTable
        Validated, immutable table.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file content is invalid (see ``build_statistics_table``).
    """
    path = Path(path) if path is not None else DEFAULT_STATISTICS_PATH
    if not path.exists():
        raise FileNotFoundError(f"Vaccination statistics file not found: {path}")

    cache_key = f"{path.resolve()}|{on_invalid.value}"
    cached = _STATISTICS_TABLES.get(cache_key)
    if cached is not None:
        return cached

    LOG.info("Loading vaccination statistics from %s", path)
    df = pd.read_csv(path, dtype={WEEK_COLUMN: str})
    table = build_statistics_table(df, source=str(path), on_invalid=on_invalid)

    if not table.is_empty:
        LOG.info(
            "Loaded %d weeks of vaccination statistics (%s to %s, %d doses)",
            len(table),
            table.entries[0].week_ending.isoformat(),
            table.entries[-1].week_ending.isoformat(),
            table.max_cumulative_doses,
        )
    _STATISTICS_TABLES.set(cache_key, table)
    return table


def estimate(
    country: str,
    opaque_id: str,
    table: VaccinationStatisticsTable,
    supported_country: str = SUPPORTED_COUNTRY,
) -> Tuple[int, int]:
    """Estimate the (month, year) a sequential opaque identifier was issued.

    Parameters
    ----------
    country : str
        Issuing country of the UVCI.
    opaque_id : str
        Identifier segment from ``opaque.decode``, e.g. "V12916227".
    table : VaccinationStatisticsTable
        Cumulative dose counts for ``supported_country``.
    supported_country : str
        The only country for which identifiers are sequential dose counts.

    Returns
    -------
    Tuple[int, int]
        (month, year) of the first week whose cumulative count reaches the
        identifier's number; (0, 0) for other countries, non-numeric
        identifiers, an empty table, or numbers beyond the table.
    """
    if country != supported_country:
        return NO_ESTIMATE

    doses = numeric_portion(opaque_id)
    if doses is None:
        return NO_ESTIMATE

    week = table.find_week(doses)
    if week is None:
        return NO_ESTIMATE
    return week.week_ending.month, week.week_ending.year


def clear_cache() -> None:
    """Clear the statistics table cache. Useful for testing."""
    _STATISTICS_TABLES.clear()
