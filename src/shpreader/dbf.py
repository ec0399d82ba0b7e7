from __future__ import annotations

import logging
from itertools import accumulate
from struct import unpack
from typing import IO

from .classes import Field
from .exceptions import FormatError, ShapefileException

logger = logging.getLogger(__name__)


class Table:
    """Random access to the attribute values of a .dbf file.

    The table is addressed by (row, field) pairs. Nothing is read
    when the Table is created: the .dbf file is opened and its header
    parsed on the first call that needs it, and each value is then
    read with a single seek, at an offset computed from the header
    (the record length, and the sizes of the fields before it).
    Values are returned as text, stripped of the space padding the
    format fills them with. Field names and values are decoded with
    the given encoding and encodingErrors ("strict" by default, which
    raises a UnicodeDecodeError on bytes the encoding cannot decode).
    """

    def __init__(
        self,
        dbf: IO[bytes] | None = None,
        shapeName: str | None = None,
        *,
        encoding: str = "utf-8",
        encodingErrors: str = "strict",
    ):
        self.dbf = dbf
        self.shapeName = shapeName
        self.encoding = encoding
        self.encodingErrors = encodingErrors
        self._files_to_close: list[IO[bytes]] = []
        self._loaded = False
        self.numRecords: int | None = None
        self._fields: list[Field] = []
        self._fieldStarts: list[int] = []
        self.__fieldLookup: dict[str, int] = {}
        self.__dbfHdrLength = 0
        self.__recordLength = 0

    def __repr__(self) -> str:
        name = self.shapeName or "<file object>"
        if not self._loaded:
            return f"Table({name}, not loaded)"
        return f"Table({name}, {self.numRecords} records, {len(self._fields)} fields)"

    @property
    def headerLength(self) -> int:
        self.ensure_open()
        return self.__dbfHdrLength

    @property
    def recordLength(self) -> int:
        self.ensure_open()
        return self.__recordLength

    @property
    def fields(self) -> list[Field]:
        """The field descriptors, in the order they are stored in the file."""
        self.ensure_open()
        return list(self._fields)

    def ensure_open(self) -> None:
        """Opens the .dbf file and reads its header, on first use only."""
        if self._loaded:
            return
        if self.dbf is None:
            if not self.shapeName:
                raise ShapefileException(
                    "Shapefile Reader requires a dbf file or file-like object to read attributes."
                )
            self.dbf = self._open_dbf(self.shapeName)
        self.__dbfHeader()
        self._loaded = True

    def _open_dbf(self, shapeName: str) -> IO[bytes]:
        """
        Opens the .dbf file with the extension as lower, or else upper case.
        The error from the lower case attempt is raised if neither exists.
        """
        try:
            dbf = open(f"{shapeName}.dbf", "rb")
        except OSError as e:
            try:
                dbf = open(f"{shapeName}.DBF", "rb")
            except OSError:
                raise e from None
        self._files_to_close.append(dbf)
        logger.debug("Opened %s.dbf", shapeName)
        return dbf

    def __dbfHeader(self) -> None:
        """Reads a dbf header. Xbase-related code borrows heavily from ActiveState Python Cookbook Recipe 362715 by Raymond Hettinger"""
        dbf = self.dbf
        assert dbf is not None
        dbf.seek(0)
        header = dbf.read(32)
        if len(header) != 32:
            raise FormatError(
                f"The dbf header is {len(header)} bytes long, expected at least 32."
            )
        self.numRecords, self.__dbfHdrLength, self.__recordLength = unpack(
            "<xxxxLHH20x", header
        )
        if self.__dbfHdrLength < 33:
            raise FormatError(f"Invalid dbf header length: {self.__dbfHdrLength}")

        # read fields
        numFields = (self.__dbfHdrLength - 33) // 32
        descriptors = dbf.read(32 * numFields)
        if len(descriptors) != 32 * numFields:
            raise FormatError(
                f"The dbf header declares {numFields} fields but was truncated."
            )
        self._fields = [
            Field.from_descriptor(
                descriptors[i : i + 32], self.encoding, self.encodingErrors
            )
            for i in range(0, len(descriptors), 32)
        ]
        terminator = dbf.read(1)
        if terminator != b"\r":
            logger.warning(
                "Shapefile dbf header lacks expected terminator. (likely corrupt?)"
            )

        # offset of each field from the start of a record, after the deletion flag
        self._fieldStarts = [0, *accumulate(f.size for f in self._fields)][:-1]
        self.__fieldLookup = {f.name: i for i, f in enumerate(self._fields)}
        logger.debug(
            "Read dbf header: %d records, %d fields, header length %d, record length %d",
            self.numRecords,
            numFields,
            self.__dbfHdrLength,
            self.__recordLength,
        )

    def row_count(self) -> int:
        """Returns the number of records in the dbf table."""
        self.ensure_open()
        assert self.numRecords is not None
        return self.numRecords

    def field_index(self, name: str) -> int:
        """Returns the position of a field given its name."""
        self.ensure_open()
        try:
            return self.__fieldLookup[name]
        except KeyError:
            raise ValueError(f'"{name}" is not a valid field name') from None

    def __restrictIndex(self, row: int, field: int | str) -> int:
        """Checks a (row, field) pair is inside the table, with a clearer
        error message than a bad seek would give. Negative indices are
        not wrapped around. Returns the field as an index."""
        if isinstance(field, str):
            field = self.field_index(field)
        assert self.numRecords is not None
        if not 0 <= row < self.numRecords:
            raise IndexError(
                f"Record index: {row} out of range.  Number of records: {self.numRecords}"
            )
        if not 0 <= field < len(self._fields):
            raise IndexError(
                f"Field index: {field} out of range.  Number of fields: {len(self._fields)}"
            )
        return field

    def field_offset(self, row: int, field: int | str) -> int:
        """Returns the byte offset of a value in the .dbf file.
        The leading 1 skips the deletion flag at the start of each record."""
        self.ensure_open()
        field = self.__restrictIndex(row, field)
        return (
            1
            + self.__dbfHdrLength
            + row * self.__recordLength
            + self._fieldStarts[field]
        )

    def read_attribute(self, row: int, field: int | str) -> str:
        """Returns the value of a field in a row as text.
        The field can be given by position or by name. The bytes are
        decoded with the encoding and encodingErrors given to the Table,
        so with the default "strict" errors a value that is not valid in
        the encoding raises a UnicodeDecodeError. Pass
        encodingErrors="replace" to read such files anyway."""
        self.ensure_open()
        field = self.__restrictIndex(row, field)
        size = self._fields[field].size
        f = self.dbf
        assert f is not None
        f.seek(self.field_offset(row, field))
        value = f.read(size)
        if len(value) != size:
            raise FormatError(
                f"Attribute at row {row}, field {field} is truncated: "
                f"expected {size} bytes, got {len(value)}"
            )
        # remove null-padding at end of strings, and the space padding
        text = value.decode(self.encoding, self.encodingErrors)
        return text.rstrip("\x00").strip(" ")

    def record(self, row: int) -> list[str]:
        """Returns every value of a row, in field order."""
        self.ensure_open()
        return [self.read_attribute(row, i) for i in range(len(self._fields))]

    def close(self) -> None:
        # Close any files that the table opened (but not those given by user)
        for attribute in self._files_to_close:
            try:
                attribute.close()
            except OSError:
                pass
        self._files_to_close = []
