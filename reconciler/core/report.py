import csv
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Optional, Union

from reconciler.models.report import ReportRow

REPORT_COLUMNS: List[str] = list(ReportRow.model_fields)

def _format_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

def format_row(row: ReportRow) -> List[str]:
    """Report cells in column order, statuses as wire strings"""
    values = row.model_dump(mode="json")
    return [_format_value(values[column]) for column in REPORT_COLUMNS]

@contextmanager
def _open_output(output: Optional[Union[str, Path]]) -> Iterator[IO[str]]:
    if output is None:
        yield sys.stdout
        sys.stdout.flush()
        return
    with open(output, "w", newline="") as handle:
        yield handle

def write_rows(rows: Iterable[ReportRow], stream: IO[str], delimiter: str = "\t") -> int:
    """Write a header and one line per row to an open text stream"""
    writer = csv.writer(stream, delimiter=delimiter, lineterminator="\n")
    writer.writerow(REPORT_COLUMNS)
    count = 0
    for row in rows:
        writer.writerow(format_row(row))
        count += 1
    return count

def write_report(rows: Iterable[ReportRow], output: Optional[Union[str, Path]] = None, delimiter: str = "\t") -> int:
    """Write the report to a file, or to stdout when no path is given"""
    with _open_output(output) as stream:
        return write_rows(rows, stream, delimiter)
