"""UVCI batch parser command-line entry point.

Reads a file of UVCI strings, parses each one and writes the accepted
records in the configured format.

**Error Handling Philosophy:**

- **Per-record errors** (malformed identifier, invalid check character):
  - Logged and skipped; remaining identifiers continue processing
  - The run completes successfully and reports how many were rejected

- **Infrastructure errors** (missing input/config/statistics file, invalid
  configuration) always fail fast:
  - No output is written
  - Exit code 1

**Exit Codes:**
- 0: All lines processed (some may have been rejected)
- 1: Infrastructure error
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import yaml

from . import batch
from .config_loader import load_config
from .enums import OutputFormat
from .parser import UVCIParser

SCRIPT_DIR = Path(__file__).resolve().parent
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_CONFIG_DIR = SCRIPT_DIR / "config"

OUTPUT_EXTENSIONS = {
    OutputFormat.TEXT: "txt",
    OutputFormat.CSV: "csv",
    OutputFormat.GRAPH: "cypher",
}

LOG = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Parse and verify EU Digital COVID Certificate identifiers (UVCI)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s uvcis.txt
  %(prog)s uvcis.txt --format csv --output output/uvcis.csv
        """,
    )

    parser.add_argument(
        "input_file",
        type=Path,
        help="Text file with one UVCI per line",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        dest="output_path",
        help=f"Output file (default: {DEFAULT_OUTPUT_DIR}/<input>_<run_id>.<ext>)",
    )
    parser.add_argument(
        "--format",
        choices=sorted(OutputFormat.all_values()),
        default=None,
        dest="output_format",
        help="Output format (default: output.format from parameters.yaml)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_DIR,
        dest="config_dir",
        help=f"Config directory (default: {DEFAULT_CONFIG_DIR})",
    )

    return parser.parse_args(argv)


def configure_logging(output_dir: Path, run_id: str) -> Path:
    """Configure file and console logging for a batch run.

    Parameters
    ----------
    output_dir : Path
        Root output directory where the logs subdirectory will be created.
    run_id : str
        Unique run identifier used in the log filename.

    Returns
    -------
    Path
        Path to the created log file.
    """
    log_dir = output_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"uvci_{run_id}.log"

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    return log_path


def print_summary(result: batch.BatchResult, output_path: Path, duration: float) -> None:
    """Print the run summary."""
    print()
    print(f"{'=' * 60}")
    print("UVCI parsing complete")
    print(f"{'=' * 60}")
    print(f"  - {'Identifiers read':<20} {result.total}")
    print(f"  - {'Accepted':<20} {len(result.records)}")
    print(f"  - {'Rejected':<20} {len(result.failures)}")
    for failure in result.failures:
        print(f"      line {failure.line_number}: {failure.reason} ({failure.uvci})")
    print(f"  - {'Output':<20} {output_path}")
    print(f"  - {'Time':<20} {duration:.1f}s")


def main(argv: Optional[List[str]] = None) -> int:
    """Run the batch parser."""
    args = parse_args(argv)
    run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")

    try:
        config = load_config(args.config_dir / "parameters.yaml")
        output_format = OutputFormat.from_string(
            args.output_format or config.get("output", {}).get("format")
        )
        output_path = args.output_path
        if output_path is None:
            output_path = (
                DEFAULT_OUTPUT_DIR
                / f"{args.input_file.stem}_{run_id}.{OUTPUT_EXTENSIONS[output_format]}"
            )
        output_path = output_path.resolve()

        log_path = configure_logging(output_path.parent, run_id)
        LOG.info("Run %s: parsing %s", run_id, args.input_file)

        start = time.time()
        parser = UVCIParser.from_config(config)
        lines = batch.read_uvcis(args.input_file)
        result = batch.parse_batch(lines, parser)
        batch.write_output(result, output_path, output_format, config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print_summary(result, output_path, time.time() - start)
    print(f"Log: {log_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
