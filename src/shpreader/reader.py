from __future__ import annotations

import io
from collections.abc import Iterator
from os import PathLike
from types import TracebackType
from typing import IO, Any

from .classes import Field, FileHeader, ShapeRecord, Shapes
from .dbf import Table
from .exceptions import ShapefileException
from .helpers import fsdecode_if_pathlike, strip_extension
from .shapes import Shape
from .shp import ShapeReader
from .types import BBox, BinaryFileT, MBox, ZBox


class Reader:
    """Reads the geometry (.shp) and the attributes (.dbf) of a
    shapefile as a unit. The "shapefile" argument in the constructor
    is the name of the file you want to open, with or without an
    extension. Alternatively the shp and dbf keyword arguments take
    file names or file-like objects.

    Only the .shp header and its record headers are read upon loading.
    Shapes are then decoded one record at a time by advance() (or by iterating over
    the reader), and the .dbf file is only opened the first time an
    attribute is asked for. By convention the i-th shape in the file
    goes with the i-th row of the attribute table.

    Files opened by the reader are closed by close() or on leaving
    a with block. File-like objects given by the caller are left open.
    """

    def __init__(
        self,
        shapefile_path: str | PathLike[Any] = "",
        /,
        *,
        encoding: str = "utf-8",
        encodingErrors: str = "strict",
        shp: BinaryFileT | None = None,
        dbf: BinaryFileT | None = None,
    ):
        self._shapes: ShapeReader | None = None
        self._table: Table | None = None
        # A shapefile opened by name may come without its .dbf file
        self._dbfOptional = False
        self.shapeName = "Not specified"
        self.encoding = encoding
        self.encodingErrors = encodingErrors

        if shapefile_path:
            path = fsdecode_if_pathlike(shapefile_path)
            if not isinstance(path, str):
                raise ShapefileException(
                    f"Could not load shapefile from: {shapefile_path}"
                )
            self.shapeName = strip_extension(path)
            self._shapes = ShapeReader.open(path)
            self._table = self.__new_table(shapeName=self.shapeName)
            self._dbfOptional = True
            return

        if shp is not None:
            self._shapes = self.__shape_reader(shp)
            self.shapeName = self._shapes.shapeName
        if dbf is not None:
            self._table = self.__table_from(dbf)

    def __shape_reader(self, shp: BinaryFileT) -> ShapeReader:
        if isinstance(shp, (str, PathLike)):
            return ShapeReader.open(shp)
        return ShapeReader(self.__seek_0_on_file_obj(shp))

    def __table_from(self, dbf: BinaryFileT) -> Table:
        if isinstance(dbf, (str, PathLike)):
            shapeName = strip_extension(fsdecode_if_pathlike(dbf))
            return self.__new_table(shapeName=shapeName)
        return self.__new_table(dbf=self.__seek_0_on_file_obj(dbf))

    def __new_table(
        self, dbf: IO[bytes] | None = None, shapeName: str | None = None
    ) -> Table:
        return Table(
            dbf,
            shapeName,
            encoding=self.encoding,
            encodingErrors=self.encodingErrors,
        )

    @staticmethod
    def __seek_0_on_file_obj(file_: IO[bytes]) -> IO[bytes]:
        if not hasattr(file_, "read"):
            raise ShapefileException(
                f"Could not load shapefile constituent file from: {file_}"
            )
        # Copy if required
        try:
            file_.seek(0)
            return file_
        except (AttributeError, io.UnsupportedOperation):
            return io.BytesIO(file_.read())

    def __str__(self) -> str:
        """
        Use some general info on the shapefile as __str__
        """
        info = ["shapefile Reader"]
        if self._shapes:
            info.append(
                f"    {self._shapes.numShapes} shapes (type '{self._shapes.shapeTypeName}')"
            )
        if self._table and self._table.dbf is not None:
            info.append(
                f"    {self._table.row_count()} records ({len(self._table.fields)} fields)"
            )
        return "\n".join(info)

    def __enter__(self) -> Reader:
        """
        Enter phase of context manager.
        """
        return self

    def __exit__(
        self,
        exc_type: BaseException | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        """
        Exit phase of context manager, close opened files.
        """
        self.close()
        return None

    def __del__(self) -> None:
        self.close()

    def close(self) -> None:
        """Closes the .shp and the .dbf files, if the reader opened them.
        Calling close more than once is harmless."""
        shapes = getattr(self, "_shapes", None)
        if shapes is not None:
            shapes.close()
        table = getattr(self, "_table", None)
        if table is not None:
            table.close()

    @property
    def shp(self) -> IO[bytes] | None:
        return self._shapes.shp if self._shapes else None

    @property
    def dbf(self) -> IO[bytes] | None:
        return self._table.dbf if self._table else None

    @property
    def shapeReader(self) -> ShapeReader:
        """The reader of the .shp file. A ShapefileException is raised
        if the Reader was not given one."""
        if self._shapes is None:
            raise ShapefileException(
                "Shapefile Reader requires a shapefile or file-like object. (no shp file found)"
            )
        return self._shapes

    @property
    def table(self) -> Table:
        """The attribute table of the .dbf file. A ShapefileException is
        raised if the Reader was not given one."""
        if self._table is None:
            raise ShapefileException(
                "Shapefile Reader requires a shapefile or file-like object. (no dbf file found)"
            )
        return self._table

    # Geometry

    @property
    def header(self) -> FileHeader:
        return self.shapeReader.header

    @property
    def shapeType(self) -> int:
        return self.shapeReader.shapeType

    @property
    def shapeTypeName(self) -> str:
        return self.shapeReader.shapeTypeName

    @property
    def bbox(self) -> BBox:
        return self.shapeReader.bbox

    @property
    def zbox(self) -> ZBox:
        return self.shapeReader.zbox

    @property
    def mbox(self) -> MBox:
        return self.shapeReader.mbox

    @property
    def shpLength(self) -> int:
        return self.shapeReader.shpLength

    @property
    def state(self) -> str:
        return self.shapeReader.state

    def advance(self) -> bool:
        """Decodes the next shape. Returns False at the end of the
        shapes, or once an error was met (see last_error())."""
        return self.shapeReader.advance()

    def current_shape(self) -> tuple[int, Shape] | None:
        """Returns the zero based index and the shape decoded by the
        last successful advance(), or None."""
        return self.shapeReader.current_shape()

    def last_error(self) -> Exception | None:
        """Returns the error that stopped reading shapes, or None
        if the shapes were read to the end (or are not finished)."""
        if self._shapes is None:
            return None
        return self._shapes.last_error()

    def iterShapes(self) -> Iterator[Shape]:
        """Returns a generator of the remaining shapes in the shapefile.
        Useful for handling large shapefiles."""
        return self.shapeReader.iterShapes()

    def shapes(self) -> Shapes:
        """Returns all the remaining shapes in the shapefile."""
        shapes = Shapes()
        shapes.extend(self.iterShapes())
        return shapes

    # Attributes

    @property
    def fields(self) -> list[Field]:
        return self.table.fields

    @property
    def numRecords(self) -> int:
        return self.table.row_count()

    def row_count(self) -> int:
        """Returns the number of rows in the attribute table."""
        return self.table.row_count()

    def field_index(self, name: str) -> int:
        return self.table.field_index(name)

    def field_offset(self, row: int, field: int | str) -> int:
        return self.table.field_offset(row, field)

    def read_attribute(self, row: int, field: int | str) -> str:
        """Returns the value of the given field (position or name)
        in the given row, as text stripped of its padding."""
        return self.table.read_attribute(row, field)

    def record(self, i: int = 0) -> list[str]:
        """Returns the values of every field in row i."""
        return self.table.record(i)

    # Both

    def __pairedTable(self) -> Table | None:
        """The table to read the records of the shapes from, or None if
        there is no .dbf. A missing .dbf next to a shapefile opened by
        name counts as none; read_attribute() and record() still raise."""
        if self._table is None:
            return None
        try:
            self._table.ensure_open()
        except FileNotFoundError:
            if not self._dbfOptional:
                raise
            return None
        return self._table

    def iterShapeRecords(self) -> Iterator[ShapeRecord]:
        """Returns a generator of combination geometry/attribute records
        for the remaining shapes in the shapefile. The record of a shape
        is the attribute row at the position of the shape in the file,
        or None if the Reader has no .dbf file."""
        table: Table | None = None
        for i, shape in enumerate(self.iterShapes()):
            if i == 0:
                table = self.__pairedTable()
            record = table.record(shape.oid) if table is not None else None
            yield ShapeRecord(shape=shape, record=record)

    def __iter__(self) -> Iterator[ShapeRecord]:
        """Iterates through the shapes/records in the shapefile."""
        yield from self.iterShapeRecords()

    def __len__(self) -> int:
        """Returns the number of shapes in the shapefile, or else the
        number of records in the attribute table."""
        if self._shapes is not None:
            return self._shapes.numShapes
        if self._table is not None:
            return self._table.row_count()
        # No file loaded, treat as 'empty' shapefile
        return 0
