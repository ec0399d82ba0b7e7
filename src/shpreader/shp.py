from __future__ import annotations

import io
import logging
import os
from collections.abc import Iterator
from struct import error, unpack
from typing import IO, Any

from .classes import FileHeader
from .constants import (
    FILE_CODE,
    FILE_VERSION,
    HEADER_LENGTH,
    NODATA,
    RECORD_HEADER_LENGTH,
    SHAPETYPE_LOOKUP,
)
from .cursor import ReaderState, _Cursor
from .exceptions import FormatError, ShapefileException
from .helpers import (
    fsdecode_if_pathlike,
    strip_extension,
    unpack_2_int32_be,
    unpack_int32_le,
)
from .shapes import Shape, decode_shape, shape_class_for
from .types import BBox, MBox, ZBox

logger = logging.getLogger(__name__)


class ShapeReader:
    """Reads the geometry records of a .shp file, one at a time.

    The 100 byte file header is read and checked when the reader is
    created, and the record headers are counted (see numShapes). Each
    call to advance() then decodes the next record into a new Shape,
    available from current_shape(), until the end of the file as
    declared by the header is reached.

    The first error met while decoding (an I/O error, a truncated
    record, or an unknown shape type) stops the reader for good:
    advance() returns False from then on without reading anything,
    and the error is kept for last_error(). Reaching the end of the
    file is not an error, and leaves last_error() as None.
    """

    def __init__(
        self,
        shp: IO[bytes],
        shapeName: str | None = None,
        *,
        closeShp: bool = False,
    ):
        self.shp = shp
        self.shapeName = shapeName or "Not specified"
        self._files_to_close: list[IO[bytes]] = [shp] if closeShp else []
        self.header: FileHeader = self.__shpHeader()
        # Counted from the record headers when the file is opened
        self.numShapes = self.__countRecords()
        self._cursor = _Cursor(shp, self.header.fileLength)
        self._shape: Shape | None = None
        # Number of records decoded so far, the index of the next shape
        self._nextIndex = 0
        self.recordNumber: int | None = None

    @classmethod
    def open(cls, shapefile_path: str | os.PathLike[Any]) -> ShapeReader:
        """Opens <stem>.shp (or <stem>.SHP) for reading. Any trailing
        3 character extension of the given path is ignored."""
        shapeName = strip_extension(fsdecode_if_pathlike(shapefile_path))
        try:
            shp = open(f"{shapeName}.shp", "rb")
        except OSError as e:
            try:
                shp = open(f"{shapeName}.SHP", "rb")
            except OSError:
                raise e from None
        try:
            reader = cls(shp, shapeName, closeShp=True)
        except Exception:
            shp.close()
            raise
        logger.debug(
            "Opened %s.shp: %s, %d bytes",
            shapeName,
            reader.shapeTypeName,
            reader.shpLength,
        )
        return reader

    def __repr__(self) -> str:
        return (
            f"ShapeReader({self.shapeName}, type '{self.shapeTypeName}', "
            f"state {self.state})"
        )

    def __shpHeader(self) -> FileHeader:
        """Reads and checks the header of a .shp file.
        The fields are checked in the order they are stored."""
        shp = self.shp
        shp.seek(0)
        header = shp.read(HEADER_LENGTH)
        # File code
        if len(header) >= 4:
            (fileCode,) = unpack(">i", header[:4])
            if fileCode != FILE_CODE:
                raise FormatError(
                    f"Not a shapefile: file code is {fileCode}, expected {FILE_CODE}."
                )
        if len(header) != HEADER_LENGTH:
            raise FormatError(
                f"The shp header is {len(header)} bytes long, expected {HEADER_LENGTH}."
            )
        # File length (16-bit word * 2 = bytes)
        fileLength = unpack(">i", header[24:28])[0] * 2
        version = unpack("<i", header[28:32])[0]
        if version != FILE_VERSION:
            raise FormatError(
                f"Unsupported shapefile version: {version}, expected {FILE_VERSION}."
            )
        shapeType = unpack_int32_le(header[32:36])[0]
        shape_class_for(shapeType)
        # The shapefile's bounding box (lower left, upper right)
        bbox: BBox = unpack("<4d", header[36:68])
        # Elevation
        zbox: ZBox = unpack("<2d", header[68:84])
        # Measure
        m_bounds = [
            float(m_bound) if m_bound > NODATA else None
            for m_bound in unpack("<2d", header[84:100])
        ]
        mbox: MBox = (m_bounds[0], m_bounds[1])
        shp.seek(HEADER_LENGTH)
        return FileHeader(
            fileCode=fileCode,
            fileLength=fileLength,
            version=version,
            shapeType=shapeType,
            bbox=bbox,
            zbox=zbox,
            mbox=mbox,
        )

    @property
    def shapeType(self) -> int:
        return self.header.shapeType

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP[self.shapeType]

    @property
    def bbox(self) -> BBox:
        """The bounding box of all the shapes, as stored in the file header."""
        return self.header.bbox

    @property
    def zbox(self) -> ZBox:
        return self.header.zbox

    @property
    def mbox(self) -> MBox:
        return self.header.mbox

    @property
    def shpLength(self) -> int:
        """The length of the .shp file in bytes, as stored in the file header."""
        return self.header.fileLength

    @property
    def state(self) -> str:
        return self._cursor.state

    def advance(self) -> bool:
        """Decodes the next record. Returns False at the end of the
        file, or once an error has been met (see last_error())."""
        cursor = self._cursor
        # The caller owns the previous shape from here on
        self._shape = None
        self.recordNumber = None
        if cursor.state != ReaderState.READY:
            return False
        try:
            if cursor.at_end():
                return False
            recordStart = cursor.tell()
            recNum, recLength = unpack_2_int32_be(cursor.read(RECORD_HEADER_LENGTH))
            if recLength < 2:
                raise FormatError(
                    f"Record {recNum} at offset {recordStart} is too short to "
                    f"hold a shape type: {recLength} 16-bit words."
                )
            # Convert from num of 16 bit words, to 8 bit bytes
            recLength_bytes = 2 * recLength
            # Read the entire record into memory, which bounds what the
            # shape decoder can read to the length declared for the record
            b_io = io.BytesIO(cursor.read(recLength_bytes))
            (shapeType,) = unpack_int32_le(b_io.read(4))
            shape = decode_shape(shapeType, b_io, recLength_bytes, self._nextIndex)
            # Seek to the end of this record as defined by the record header because
            # the format doesn't require the actual content to fill the declared
            # length.  Probably allowed for lazy feature deletion.
            cursor.seek(recordStart + RECORD_HEADER_LENGTH + recLength_bytes)
        except error as e:
            cursor.latch(FormatError(f"Truncated record {recNum}: {e}"))
            return False
        except (OSError, ValueError, ShapefileException) as e:
            cursor.latch(e)
            return False
        self._shape = shape
        self._nextIndex += 1
        self.recordNumber = recNum
        return True

    def current_shape(self) -> tuple[int, Shape] | None:
        """Returns the zero based index and the shape decoded by the
        last successful advance(), or None if there is none. The index
        is the position of the record in the file, which is its record
        number minus 1 when the file numbers its records from 1 without
        gaps. The stored record number is kept in recordNumber."""
        if self._shape is None:
            return None
        return self._shape.oid, self._shape

    def last_error(self) -> Exception | None:
        """Returns the error that stopped the reader, or None."""
        return self._cursor.error

    def iterShapes(self) -> Iterator[Shape]:
        """Returns a generator of the remaining shapes in the shapefile.
        Raises the error that stopped the reader, if any, once
        the shapes before it have been yielded."""
        while self.advance():
            yield self._shape  # type: ignore[misc]
        err = self.last_error()
        if err is not None:
            raise err

    def __iter__(self) -> Iterator[Shape]:
        return self.iterShapes()

    def __countRecords(self) -> int:
        """Counts the records from their headers alone, without decoding
        any shape, and leaves the file after its header."""
        shp = self.shp
        # Do a fast shape iteration until the end of the records.
        numShapes = 0
        pos = shp.tell()
        while pos < self.shpLength:
            recordHeader = shp.read(RECORD_HEADER_LENGTH)
            if len(recordHeader) != RECORD_HEADER_LENGTH:
                break
            # Unpack the shape header only
            (__recNum, recLength) = unpack_2_int32_be(recordHeader)
            if recLength < 0:
                break
            numShapes += 1
            # Jump to next shape position
            pos += RECORD_HEADER_LENGTH + (2 * recLength)
            shp.seek(pos)
        shp.seek(HEADER_LENGTH)
        return numShapes

    def close(self) -> None:
        # Close any files that the reader opened (but not those given by user)
        for attribute in self._files_to_close:
            try:
                attribute.close()
            except OSError:
                pass
        self._files_to_close = []
