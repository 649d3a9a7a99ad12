"""Configuration loading utilities for the UVCI parser.

Provides a centralized way to load and validate the parameters.yaml
configuration file for the parser and the batch driver.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .enums import ChecksumAlgorithm, InvalidTableBehavior, OutputFormat

SCRIPT_DIR = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = SCRIPT_DIR / "config" / "parameters.yaml"


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load and parse the parameters.yaml configuration file.

    Automatically validates the configuration after loading.

    Parameters
    ----------
    config_path : Path, optional
        Path to the configuration file. If not provided, uses the default
        location (config/parameters.yaml in the package directory).

    Returns
    -------
    Dict[str, Any]
        Parsed and validated YAML configuration as a nested dictionary.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    yaml.YAMLError
        If the configuration file is invalid YAML.
    ValueError
        If the configuration fails validation (see validate_config).
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    validate_config(config)
    return config


def resolve_path(value: str | Path, base_dir: Path = SCRIPT_DIR) -> Path:
    """Resolve a configured path; relative paths are taken from the package directory."""
    path = Path(value)
    if not path.is_absolute():
        path = base_dir / path
    return path


def validate_config(config: Dict[str, Any]) -> None:
    """Validate the entire configuration for consistency and required values.

    Parameters
    ----------
    config : Dict[str, Any]
        Configuration dictionary (result of load_config).

    Raises
    ------
    ValueError
        If required configuration is missing or invalid.

    Notes
    -----
    **Validation checks:**

    - **UVCI:** uvci.max_length, if set, must be a positive integer
    - **Checksum:** checksum.algorithm must be a known ChecksumAlgorithm
    - **Estimation:** if estimation.enabled=true, requires a two-letter
      estimation.country and a statistics_file string; on_invalid_table must
      be 'warn' or 'error'
    - **Graph:** graph.issuer_names, if set, must be a mapping
    - **Output:** output.format must be a known OutputFormat
    """
    uvci_config = config.get("uvci", {})
    max_length = uvci_config.get("max_length", 72)
    if isinstance(max_length, bool) or not isinstance(max_length, int):
        raise ValueError(
            f"uvci.max_length must be an integer, got {type(max_length).__name__}"
        )
    if max_length <= 0:
        raise ValueError(f"uvci.max_length must be positive, got {max_length}")

    checksum_config = config.get("checksum", {})
    try:
        ChecksumAlgorithm.from_string(checksum_config.get("algorithm"))
    except ValueError as exc:
        raise ValueError(f"Invalid checksum.algorithm: {exc}") from exc

    estimation_config = config.get("estimation", {})
    estimation_enabled = estimation_config.get("enabled", True)
    if not isinstance(estimation_enabled, bool):
        raise ValueError(
            f"estimation.enabled must be a boolean, "
            f"got {type(estimation_enabled).__name__}"
        )

    if estimation_enabled:
        country = estimation_config.get("country", "SE")
        if not isinstance(country, str) or len(country) != 2 or not country.isalpha():
            raise ValueError(
                f"estimation.country must be a two-letter country code, got {country!r}"
            )

        statistics_file = estimation_config.get("statistics_file")
        if statistics_file is not None and not isinstance(statistics_file, str):
            raise ValueError(
                f"estimation.statistics_file must be a string, "
                f"got {type(statistics_file).__name__}"
            )

        try:
            InvalidTableBehavior.from_string(estimation_config.get("on_invalid_table"))
        except ValueError as exc:
            raise ValueError(f"Invalid estimation.on_invalid_table: {exc}") from exc

    graph_config = config.get("graph", {})
    issuer_names = graph_config.get("issuer_names", {})
    if not isinstance(issuer_names, dict):
        raise ValueError(
            f"graph.issuer_names must be a mapping, got {type(issuer_names).__name__}"
        )

    output_config = config.get("output", {})
    try:
        OutputFormat.from_string(output_config.get("format"))
    except ValueError as exc:
        raise ValueError(f"Invalid output.format: {exc}") from exc
