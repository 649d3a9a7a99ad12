"""Line-oriented batch parsing of UVCI files.

**Input Contract:**
- Text file, one identifier per line (UTF-8)
- Leading/trailing whitespace is ignored; blank lines and lines starting
  with ``#`` are skipped

**Output Contract:**
- ``BatchResult`` with one record per accepted line and one failure per
  rejected line, both in input order
- Rendered output in the configured format (text, csv or graph)

**Error Handling:**
- Per-record ``ParseError`` is logged as a warning and collected; remaining
  lines continue processing
- Missing input file raises FileNotFoundError (infrastructure)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from . import render
from .data_models import UVCIRecord
from .enums import OutputFormat
from .errors import ParseError
from .parser import UVCIParser

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchFailure:
    """A rejected input line.

    Fields
    ------
    line_number : int
        1-based line number in the input file.
    uvci : str
        Offending input, as read.
    reason : str
        Human-readable rejection reason.
    error_type : str
        Name of the ParseError subclass raised.
    """

    line_number: int
    uvci: str
    reason: str
    error_type: str


@dataclass
class BatchResult:
    """Records and failures of one batch run."""

    records: List[UVCIRecord] = field(default_factory=list)
    failures: List[BatchFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.records) + len(self.failures)


def read_uvcis(path: Path) -> List[Tuple[int, str]]:
    """Read candidate identifiers from a text file.

    Parameters
    ----------
    path : Path
        Input file, one identifier per line.

    Returns
    -------
    List[Tuple[int, str]]
        (line number, trimmed line) for every non-blank, non-comment line.

    Raises
    ------
    FileNotFoundError
        If the input file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    lines = []
    with path.open("r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            text = line.strip()
            if not text or text.startswith("#"):
                continue
            lines.append((line_number, text))
    return lines


def parse_batch(
    lines: Iterable[str | Tuple[int, str]], parser: UVCIParser
) -> BatchResult:
    """Parse identifiers one by one, isolating failures per record.

    Parameters
    ----------
    lines : Iterable[str | Tuple[int, str]]
        Identifiers, either bare or paired with their line numbers (as
        returned by ``read_uvcis``).
    parser : UVCIParser
        Configured parser.

    Returns
    -------
    BatchResult
        Accepted records and rejected lines.
    """
    result = BatchResult()
    for index, item in enumerate(lines, start=1):
        line_number, text = item if isinstance(item, tuple) else (index, item)
        try:
            result.records.append(parser.parse(text))
        except ParseError as exc:
            LOG.warning("Line %d rejected: %s", line_number, exc)
            result.failures.append(
                BatchFailure(
                    line_number=line_number,
                    uvci=text,
                    reason=exc.reason,
                    error_type=type(exc).__name__,
                )
            )

    LOG.info(
        "Parsed %d identifier(s): %d accepted, %d rejected",
        result.total,
        len(result.records),
        len(result.failures),
    )
    return result


def render_output(
    records: Iterable[UVCIRecord],
    fmt: OutputFormat,
    config: Optional[Dict[str, Any]] = None,
) -> str:
    """Render records in the requested output format."""
    config = config or {}
    if fmt is OutputFormat.CSV:
        return render.to_csv(records)
    if fmt is OutputFormat.GRAPH:
        graph_config = config.get("graph", {})
        return render.records_to_graph(
            records,
            supported_country=config.get("estimation", {}).get("country", "SE"),
            country_name=graph_config.get("country_name"),
            issuer_names=graph_config.get("issuer_names", {}),
        )
    return "\n".join(render.to_text(record) for record in records)


def write_output(
    result: BatchResult,
    path: Path,
    fmt: OutputFormat,
    config: Optional[Dict[str, Any]] = None,
) -> Path:
    """Write the accepted records of a batch to ``path``.

    Parent directories are created as needed.

    Returns
    -------
    Path
        Path of the written file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_output(result.records, fmt, config), encoding="utf-8")
    LOG.info("Wrote %d record(s) as %s to %s", len(result.records), fmt.value, path)
    return path
