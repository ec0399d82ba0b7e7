"""
This module tests random access to the attribute values of a .dbf file.
"""

import io
import logging
import struct

# third party imports
import pytest

# our imports
import shpreader
from shapefile_builder import dbf_file


class RecordingBytesIO(io.BytesIO):
    """A BytesIO that records the position and size of each read()."""

    def __init__(self, *args):
        super().__init__(*args)
        self.reads = []

    def read(self, size=-1):
        self.reads.append((self.tell(), size))
        return super().read(size)


def test_header(cities_dbf):
    table = shpreader.Table(io.BytesIO(cities_dbf))
    assert table.row_count() == 3
    assert table.numRecords == 3
    assert table.headerLength == 32 + 3 * 32 + 1
    assert table.recordLength == 1 + 12 + 8 + 3
    assert table.fields == [
        shpreader.Field("NAME", "C", 12, 0),
        shpreader.Field("POP", "N", 8, 0),
        shpreader.Field("RANK", "N", 3, 0),
    ]


def test_read_attribute(cities_dbf):
    table = shpreader.Table(io.BytesIO(cities_dbf))
    assert table.read_attribute(0, 0) == "Oslo"
    assert table.read_attribute(1, 1) == "285900"
    assert table.read_attribute(2, 0) == "Trondheim"
    assert table.read_attribute(2, 2) == "3"


def test_read_attribute_by_name(cities_dbf):
    table = shpreader.Table(io.BytesIO(cities_dbf))
    assert table.field_index("POP") == 1
    assert table.read_attribute(1, "NAME") == "Bergen"
    with pytest.raises(ValueError):
        table.read_attribute(1, "MISSING")


def test_read_attribute_is_idempotent(cities_dbf):
    table = shpreader.Table(io.BytesIO(cities_dbf))
    first = table.read_attribute(1, 0)
    table.read_attribute(2, 2)
    assert table.read_attribute(1, 0) == first == "Bergen"


def test_field_offset():
    """
    Assert that the value of row 2, field 1 is read as 8 bytes
    starting at 1 + header length + 2 * record length + 5,
    for a field 0 of size 5 and a field 1 of size 8.
    """
    fields = [("A", "C", 5, 0), ("B", "C", 8, 0)]
    records = [["a0", "b0"], ["a1", "b1"], ["a2", "b2"]]
    f = RecordingBytesIO(dbf_file(fields, records))
    table = shpreader.Table(f)
    H = table.headerLength
    R = table.recordLength
    assert R == 1 + 5 + 8
    expected = 1 + H + 2 * R + 5
    assert table.field_offset(2, 1) == expected

    assert table.read_attribute(2, 1) == "b2"
    assert f.reads[-1] == (expected, 8)


@pytest.mark.parametrize("row", [0, 1, 2])
def test_field_offsets_follow_field_sizes(cities_dbf, row):
    table = shpreader.Table(io.BytesIO(cities_dbf))
    sizes = [f.size for f in table.fields]
    for k in range(len(sizes)):
        assert table.field_offset(row, k) == (
            1 + table.headerLength + row * table.recordLength + sum(sizes[:k])
        )


@pytest.mark.parametrize("row,field", [(3, 0), (-1, 0), (0, 3), (0, -1), (100, 100)])
def test_out_of_range(cities_dbf, row, field):
    table = shpreader.Table(io.BytesIO(cities_dbf))
    with pytest.raises(IndexError):
        table.read_attribute(row, field)


def test_record(cities_dbf):
    table = shpreader.Table(io.BytesIO(cities_dbf))
    assert table.record(0) == ["Oslo", "709037", "1"]


def test_lazy_open(tmp_path, cities_dbf):
    """
    Assert that the dbf file is only opened
    when an attribute is first needed.
    """
    base = str(tmp_path / "cities")
    table = shpreader.Table(shapeName=base)
    assert table.dbf is None
    # the file does not exist yet
    (tmp_path / "cities.dbf").write_bytes(cities_dbf)
    assert table.dbf is None
    assert table.row_count() == 3
    assert table.dbf is not None
    dbf = table.dbf
    table.ensure_open()
    assert table.dbf is dbf
    table.close()
    assert dbf.closed is True


def test_upper_case_extension(tmp_path, cities_dbf):
    (tmp_path / "cities.DBF").write_bytes(cities_dbf)
    table = shpreader.Table(shapeName=str(tmp_path / "cities"))
    assert table.row_count() == 3
    table.close()


def test_missing_file(tmp_path):
    table = shpreader.Table(shapeName=str(tmp_path / "missing"))
    with pytest.raises(FileNotFoundError):
        table.read_attribute(0, 0)


def test_no_dbf():
    table = shpreader.Table()
    with pytest.raises(shpreader.ShapefileException):
        table.row_count()


def test_caller_file_is_left_open(cities_dbf):
    f = io.BytesIO(cities_dbf)
    table = shpreader.Table(f)
    table.row_count()
    table.close()
    table.close()
    assert f.closed is False


def test_short_header():
    with pytest.raises(shpreader.FormatError):
        shpreader.Table(io.BytesIO(b"\x03" * 20)).row_count()


def test_truncated_field_descriptors(cities_dbf):
    with pytest.raises(shpreader.FormatError):
        shpreader.Table(io.BytesIO(cities_dbf[:80])).row_count()


def test_truncated_value(cities_dbf):
    table = shpreader.Table(io.BytesIO(cities_dbf[:-10]))
    assert table.read_attribute(0, 0) == "Oslo"
    with pytest.raises(shpreader.FormatError):
        table.read_attribute(2, 1)


def test_missing_terminator(caplog):
    dbf = dbf_file([("A", "C", 5, 0)], [["x"]], terminator=False)
    table = shpreader.Table(io.BytesIO(dbf))
    with caplog.at_level(logging.WARNING, logger="shpreader"):
        assert table.read_attribute(0, 0) == "x"
    assert "terminator" in caplog.text


def test_encoding():
    dbf = dbf_file([("NAME", "C", 10, 0)], [["Ñandú"]], encoding="latin-1")
    table = shpreader.Table(io.BytesIO(dbf), encoding="latin-1")
    assert table.read_attribute(0, 0) == "Ñandú"


def test_field_from_descriptor():
    """
    Assert that field names are cut at the first
    NUL byte, and stripped of space padding.
    """
    descriptor = struct.pack("<11sc4xBB14x", b"NAME  \x00XYZ", b"N", 10, 2)
    field = shpreader.Field.from_descriptor(descriptor)
    assert field == shpreader.Field("NAME", "N", 10, 2)
    assert field.name == "NAME"
    assert field.field_type == "N"
    assert field.size == 10
    assert field.decimal == 2


def test_no_fields():
    dbf = dbf_file([], [])
    table = shpreader.Table(io.BytesIO(dbf))
    assert table.fields == []
    assert table.row_count() == 0


def test_undecodable_value():
    dbf = dbf_file([("NAME", "C", 10, 0)], [["Ñandú"]], encoding="latin-1")
    table = shpreader.Table(io.BytesIO(dbf))
    with pytest.raises(UnicodeDecodeError):
        table.read_attribute(0, 0)
    table = shpreader.Table(io.BytesIO(dbf), encodingErrors="replace")
    assert table.read_attribute(0, 0) == "\ufffdand\ufffd"


def test_open_is_logged(tmp_path, cities_dbf, caplog):
    (tmp_path / "cities.dbf").write_bytes(cities_dbf)
    base = str(tmp_path / "cities")
    table = shpreader.Table(shapeName=base)
    with caplog.at_level(logging.DEBUG, logger="shpreader"):
        table.row_count()
    table.close()
    assert f"Opened {base}.dbf" in caplog.text
    assert "3 records, 3 fields" in caplog.text
