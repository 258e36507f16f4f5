import io

import numpy as np
import pytest

from constellations import PointParseError, load_points, parse_point, read_points
from constellations.reader import points_frame


def test_parse_point_trims_whitespace():
    assert parse_point("  -1, 2 ,3,-4 \n") == (-1, 2, 3, -4)


@pytest.mark.parametrize("record", ["1,2,3", "1,2,3,4,5", "", "1;2;3;4"])
def test_parse_point_wrong_field_count(record):
    with pytest.raises(ValueError, match="unrecognized point"):
        parse_point(record)


def test_parse_point_non_integer():
    with pytest.raises(ValueError, match="not an integer"):
        parse_point("1,2,x,4")


@pytest.mark.parametrize("field", ["1_000", "\u0663", "1.5", "+", "0x10"])
def test_parse_point_rejects_non_decimal_fields(field):
    with pytest.raises(ValueError, match="not an integer"):
        parse_point(f"{field},0,0,0")


def test_parse_point_accepts_signed_fields():
    assert parse_point("+3,-3,0,-0") == (3, -3, 0, 0)


def test_read_points_from_text():
    pts = read_points("0,0,0,0\n3,0,0,0\n-6,1,2,3\n")
    assert pts.shape == (3, 4)
    assert pts.dtype == np.int64
    np.testing.assert_array_equal(pts[2], [-6, 1, 2, 3])


def test_read_points_empty():
    assert read_points("").shape == (0, 4)
    assert read_points([]).shape == (0, 4)


def test_read_points_reports_offending_line():
    with pytest.raises(PointParseError) as exc:
        read_points(["0,0,0,0", "1,2,three,4", "5,5,5,5"])
    err = exc.value
    assert err.line_no == 2
    assert err.record == "1,2,three,4"
    assert isinstance(err.__cause__, ValueError)
    assert "line 2" in str(err)
    assert "not an integer" in str(err)


def test_blank_line_is_malformed():
    with pytest.raises(PointParseError) as exc:
        read_points("0,0,0,0\n\n1,1,1,1\n")
    assert exc.value.line_no == 2


def test_load_points_from_file(tmp_path):
    path = tmp_path / "points.txt"
    path.write_text("0,0,0,0\n4,0,0,0\n")
    pts = load_points(str(path))
    np.testing.assert_array_equal(pts, [[0, 0, 0, 0], [4, 0, 0, 0]])


def test_load_points_from_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("1,1,1,1\n"))
    assert load_points("-").shape == (1, 4)


def test_points_frame():
    df = points_frame([(1, 2, 3, 4)])
    assert list(df.columns) == ["x", "y", "z", "t"]
    assert df.iloc[0].tolist() == [1, 2, 3, 4]


def test_out_of_range_field_names_the_line():
    with pytest.raises(PointParseError) as exc:
        read_points("0,0,0,0\n99999999999999999999,0,0,0\n")
    assert exc.value.line_no == 2
    assert "out of range" in str(exc.value)


def test_int64_bounds_are_accepted():
    lo, hi = np.iinfo(np.int64).min, np.iinfo(np.int64).max
    pts = read_points(f"{lo},{hi},0,0\n")
    np.testing.assert_array_equal(pts[0], [lo, hi, 0, 0])
