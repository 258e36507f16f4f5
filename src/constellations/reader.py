"""Line-delimited ``x,y,z,t`` point records -> (N, 4) int64 arrays."""

from __future__ import annotations

import re
import sys
from typing import Iterable, Tuple

import numpy as np
import pandas as pd

from .core4d import COORD_COLS, as_points

_INT_FIELD = re.compile(r"[+-]?[0-9]+")
_INT64 = np.iinfo(np.int64)


class PointParseError(ValueError):
    """A record that is not four comma-separated integers."""

    def __init__(self, line_no: int, record: str, cause: Exception) -> None:
        self.line_no = line_no
        self.record = record
        self.cause = cause
        super().__init__(f"failed to parse line {line_no} {record!r}: {cause}")


def _parse_field(field: str) -> int:
    # ASCII digits only: no underscores, no other Unicode digits
    if not _INT_FIELD.fullmatch(field):
        raise ValueError(f"field {field!r} is not an integer")
    value = int(field)
    if not (_INT64.min <= value <= _INT64.max):
        raise ValueError(f"field {field!r} is out of range for int64")
    return value


def parse_point(record: str) -> Tuple[int, int, int, int]:
    parts = [p.strip() for p in record.strip().split(",")]
    if len(parts) != len(COORD_COLS):
        raise ValueError(
            f"unrecognized point {record.strip()!r}: expected {len(COORD_COLS)} "
            f"comma-separated fields, got {len(parts)}"
        )
    x, y, z, t = (_parse_field(p) for p in parts)
    return x, y, z, t


def read_points(lines: Iterable[str]) -> np.ndarray:
    """
    Parse every record; the first malformed one aborts with PointParseError.

    Lines are taken as-is, so a blank line in the middle of the input is an
    error. Strings are split with ``splitlines`` first, which drops the empty
    record after a trailing newline.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()

    rows = []
    for line_no, line in enumerate(lines, start=1):
        record = line.rstrip("\r\n")
        try:
            rows.append(parse_point(record))
        except ValueError as e:
            raise PointParseError(line_no, record, e) from e
    return as_points(rows)


def load_points(path: str = "-") -> np.ndarray:
    """Read points from a file path, or from stdin when path is '-'."""
    if path == "-":
        return read_points(sys.stdin.read())
    with open(path, "r") as f:
        return read_points(f.read())


def points_frame(points) -> pd.DataFrame:
    return pd.DataFrame(as_points(points), columns=list(COORD_COLS))
