from __future__ import annotations

from struct import Struct
from typing import NamedTuple, Optional

from .shapes import Shape
from .types import BBox, MBox, ZBox

unpack_field_descriptor = Struct("<11sc4xBB14x").unpack


class Field(NamedTuple):
    """A column descriptor from the header of a .dbf file."""

    name: str
    field_type: str
    size: int
    decimal: int

    @classmethod
    def from_descriptor(
        cls,
        descriptor: bytes,
        encoding: str = "utf-8",
        encodingErrors: str = "strict",
    ) -> Field:
        """Parses one 32 byte field descriptor. The name is NUL
        terminated and may be padded with spaces."""
        encoded_name, encoded_type_char, size, decimal = unpack_field_descriptor(
            descriptor
        )
        if b"\x00" in encoded_name:
            encoded_name = encoded_name[: encoded_name.index(b"\x00")]
        name = encoded_name.decode(encoding, encodingErrors).strip()
        field_type = encoded_type_char.decode("ascii", "replace")
        return cls(name=name, field_type=field_type, size=size, decimal=decimal)

    def __repr__(self) -> str:
        return f'Field(name="{self.name}", field_type="{self.field_type}", size={self.size}, decimal={self.decimal})'


class FileHeader(NamedTuple):
    """The fixed 100 byte header of a .shp file."""

    fileCode: int
    fileLength: int  # in bytes, the header stores 16-bit words
    version: int
    shapeType: int
    bbox: BBox
    zbox: ZBox
    mbox: MBox


class ShapeRecord:
    """A ShapeRecord object containing a shape along with its attributes,
    as the text values of the matching .dbf row."""

    def __init__(self, shape: Shape | None = None, record: list[str] | None = None):
        self.shape = shape
        self.record = record

    def __repr__(self) -> str:
        return f"ShapeRecord: {self.shape!r} {self.record!r}"


class Shapes(list[Optional[Shape]]):
    """A class to hold a list of Shape objects. Subclasses list to ensure compatibility with
    former work and to reuse all the optimizations of the builtin list."""

    def __repr__(self) -> str:
        return f"Shapes: {list(self)}"
