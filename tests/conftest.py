"""Shared pytest fixtures for unit and integration tests.

This module provides:
- Temporary directory fixtures for file I/O testing
- Small vaccination statistics tables (in memory and on disk)
- Configuration fixtures for parameter testing
- Cache cleanup for test isolation
"""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path
from typing import Any, Dict, Generator

import pytest
import yaml

from uvci import vaccination_dates
from uvci.data_models import StatisticsEntry, VaccinationStatisticsTable
from uvci.parser import UVCIParser

SMALL_STATISTICS_CSV = """week_ending,cumulative_doses
2021-01-03,100
2021-01-31,1000
2021-02-28,5000
2021-03-07,5000
2021-04-04,20000
"""


@pytest.fixture
def tmp_test_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after each test.

    Real-world significance:
    - Isolates file I/O tests from each other
    - Prevents test artifacts from polluting the file system

    Yields
    ------
    Path
        Absolute path to temporary directory (automatically deleted after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def clear_statistics_cache() -> Generator[None, None, None]:
    """Reset the statistics table cache around every test.

    Real-world significance:
    - Tables are cached per path for the lifetime of the process
    - Tests writing different content to reused paths must not see stale data
    """
    vaccination_dates.clear_cache()
    yield
    vaccination_dates.clear_cache()


@pytest.fixture
def small_statistics_table() -> VaccinationStatisticsTable:
    """Provide a five-week statistics table with a repeated count.

    Real-world significance:
    - Weeks without new doses repeat the previous cumulative count
    - Small enough to reason about boundary lookups by hand
    """
    rows = [
        (date(2021, 1, 3), 100),
        (date(2021, 1, 31), 1000),
        (date(2021, 2, 28), 5000),
        (date(2021, 3, 7), 5000),
        (date(2021, 4, 4), 20000),
    ]
    return VaccinationStatisticsTable(
        entries=tuple(StatisticsEntry(week, count) for week, count in rows),
        source="fixture",
    )


@pytest.fixture
def statistics_csv(tmp_test_dir: Path) -> Path:
    """Write the small statistics table to a CSV file.

    Returns
    -------
    Path
        Path to statistics CSV with week_ending and cumulative_doses columns.
    """
    path = tmp_test_dir / "statistics.csv"
    path.write_text(SMALL_STATISTICS_CSV, encoding="utf-8")
    return path


@pytest.fixture
def shipped_parser() -> UVCIParser:
    """Provide a parser using the shipped Swedish statistics table.

    Real-world significance:
    - Matches the parser built by the CLI with the default configuration
    """
    return UVCIParser(table=vaccination_dates.load_statistics_table())


@pytest.fixture
def default_config() -> Dict[str, Any]:
    """Provide a minimal valid configuration dictionary.

    Real-world significance:
    - Mirrors config/parameters.yaml
    - Tests can modify a copy without affecting the shipped defaults

    Returns
    -------
    Dict[str, Any]
        Configuration with all sections populated.
    """
    return {
        "uvci": {"max_length": 72},
        "checksum": {"algorithm": "luhn_mod_n"},
        "estimation": {
            "enabled": True,
            "country": "SE",
            "statistics_file": "data/se_vaccination_statistics.csv",
            "on_invalid_table": "warn",
        },
        "graph": {
            "country_name": "Sweden",
            "issuer_names": {"EHM": "E-Hälso Myndigheten"},
        },
        "output": {"format": "text"},
    }


@pytest.fixture
def config_file(tmp_test_dir: Path, default_config: Dict[str, Any]) -> Path:
    """Write default config to a parameters.yaml in a temporary directory.

    Returns
    -------
    Path
        Path to created parameters.yaml file
    """
    config_path = tmp_test_dir / "parameters.yaml"
    with config_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(default_config, f, allow_unicode=True)
    return config_path
