"""
The geometry classes of the shape types, and the decoders reading each
of them from the content of a .shp record.
"""

from __future__ import annotations

from collections.abc import Sequence
from struct import unpack

from .constants import (
    MULTIPATCH,
    MULTIPOINT,
    MULTIPOINTM,
    MULTIPOINTZ,
    NODATA,
    NULL,
    PARTTYPE_LOOKUP,
    POINT,
    POINTM,
    POINTZ,
    POLYGON,
    POLYGONM,
    POLYGONZ,
    POLYLINE,
    POLYLINEM,
    POLYLINEZ,
    SHAPETYPE_LOOKUP,
)
from .exceptions import FormatError
from .helpers import _Array
from .types import BBox, MBox, Point2D, PointsT, ReadSeekableBinStream, ZBox


def _m_or_none(m: float) -> float | None:
    # Measure values at or below NODATA are nodata values in the ESRI whitepaper
    if m > NODATA:
        return m
    return None


def _read_count(b_io: ReadSeekableBinStream, what: str) -> int:
    (count,) = unpack("<i", b_io.read(4))
    if count < 0:
        raise FormatError(f"Negative {what} count in record: {count}")
    return count


def _read_doubles(b_io: ReadSeekableBinStream, n: int) -> tuple[float, ...]:
    return unpack(f"<{n}d", b_io.read(8 * n))


def _read_points(b_io: ReadSeekableBinStream, nPoints: int) -> list[Point2D]:
    flat = _read_doubles(b_io, 2 * nPoints)
    return list(zip(flat[0::2], flat[1::2]))


def _read_range(b_io: ReadSeekableBinStream) -> tuple[float, float]:
    low, high = unpack("<2d", b_io.read(16))
    return low, high


def _room_left(b_io: ReadSeekableBinStream, end: int) -> int:
    return end - b_io.tell()


class Shape:
    """Stores the geometry of one record of a shapefile.

    Every shape type except the "Null" type contains points at some
    level, for example the vertices of a polygon. If a record holds
    several connected runs of points (the rings of a polygon or the
    lines of a polyline) those runs are called parts, and are given
    by the index of their first point in the list of points.

    The oid is the position of the record in the shapefile, counting
    from 0, which is also the row of its attributes in the .dbf file.
    """

    shapeType = NULL

    def __init__(
        self,
        points: PointsT | None = None,
        parts: Sequence[int] | None = None,
        oid: int | None = None,
    ):
        self.points: PointsT = points or []
        self.parts: Sequence[int] = parts or []
        self.__oid = -1 if oid is None else oid

    @property
    def oid(self) -> int:
        """The index position of the shape in the original shapefile"""
        return self.__oid

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP[self.shapeType]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__} #{self.__oid}"

    @classmethod
    def from_byte_stream(
        cls, b_io: ReadSeekableBinStream, end: int, oid: int
    ) -> Shape:
        """Decodes the rest of a record, after its shape type. end is
        the length of the record content, optional trailing values are
        only read if the record has room for them."""
        raise NotImplementedError


class NullShape(Shape):
    shapeType = NULL

    @classmethod
    def from_byte_stream(
        cls, b_io: ReadSeekableBinStream, end: int, oid: int
    ) -> NullShape:
        # A null shape has no content besides its shape type
        return cls(oid=oid)


class Point(Shape):
    shapeType = POINT

    def __init__(self, x: float, y: float, oid: int | None = None):
        Shape.__init__(self, points=[(x, y)], oid=oid)

    @property
    def x(self) -> float:
        return self.points[0][0]

    @property
    def y(self) -> float:
        return self.points[0][1]

    @classmethod
    def from_byte_stream(
        cls, b_io: ReadSeekableBinStream, end: int, oid: int
    ) -> Point:
        x, y = _read_doubles(b_io, 2)
        return cls(x, y, oid=oid)

    @staticmethod
    def _read_measure(b_io: ReadSeekableBinStream, end: int) -> float | None:
        # The measure of a PointM or PointZ may be left out
        if _room_left(b_io, end) < 8:
            return None
        (m,) = _read_doubles(b_io, 1)
        return _m_or_none(m)


class PointM(Point):
    shapeType = POINTM

    def __init__(
        self, x: float, y: float, m: float | None = None, oid: int | None = None
    ):
        Point.__init__(self, x, y, oid=oid)
        self.m: tuple[float | None] = (m,)

    @classmethod
    def from_byte_stream(
        cls, b_io: ReadSeekableBinStream, end: int, oid: int
    ) -> PointM:
        x, y = _read_doubles(b_io, 2)
        return cls(x, y, m=cls._read_measure(b_io, end), oid=oid)


class PointZ(PointM):
    shapeType = POINTZ

    def __init__(
        self,
        x: float,
        y: float,
        z: float = 0.0,
        m: float | None = None,
        oid: int | None = None,
    ):
        PointM.__init__(self, x, y, m=m, oid=oid)
        self.z: tuple[float] = (z,)

    @classmethod
    def from_byte_stream(
        cls, b_io: ReadSeekableBinStream, end: int, oid: int
    ) -> PointZ:
        x, y, z = _read_doubles(b_io, 3)
        return cls(x, y, z=z, m=cls._read_measure(b_io, end), oid=oid)


class _MultiShape(Shape):
    """The shapes made of many points, which store their own bounding
    box. The record content is laid out as: bounding box, part count
    (if the type has parts), point count, part indices, part types
    (multipatches only), points, Z block, then M block. Each block is
    a range followed by one value per point."""

    hasParts = False
    hasZ = False
    hasM = False

    def __init__(
        self,
        bbox: BBox,
        points: PointsT | None = None,
        parts: Sequence[int] | None = None,
        oid: int | None = None,
    ):
        Shape.__init__(self, points=points, parts=parts, oid=oid)
        self.bbox = bbox

    @classmethod
    def from_byte_stream(
        cls, b_io: ReadSeekableBinStream, end: int, oid: int
    ) -> _MultiShape:
        bbox: BBox = unpack("<4d", b_io.read(32))
        nParts = _read_count(b_io, "part") if cls.hasParts else 0
        nPoints = _read_count(b_io, "point")
        shape = cls(bbox, oid=oid)
        if nParts:
            shape.parts = _Array[int]("i", unpack(f"<{nParts}i", b_io.read(4 * nParts)))
        shape._read_part_types(b_io, nParts)
        shape.points = _read_points(b_io, nPoints)
        if cls.hasZ:
            shape._read_zs(b_io, nPoints)
        if cls.hasM:
            shape._read_ms(b_io, end, nPoints)
        return shape

    def _read_part_types(self, b_io: ReadSeekableBinStream, nParts: int) -> None:
        pass

    def _read_zs(self, b_io: ReadSeekableBinStream, nPoints: int) -> None:
        # The Z block is required, even for a record without points
        self.zbox: ZBox = _read_range(b_io)
        self.z: Sequence[float] = _Array[float]("d", _read_doubles(b_io, nPoints))

    def _read_ms(self, b_io: ReadSeekableBinStream, end: int, nPoints: int) -> None:
        # The M block is optional, and only present if the record is long enough
        if _room_left(b_io, end) < 16 + 8 * nPoints:
            self.mbox: MBox = (None, None)
            self.m: list[float | None] = [None] * nPoints
            return
        mmin, mmax = _read_range(b_io)
        self.mbox = (_m_or_none(mmin), _m_or_none(mmax))
        self.m = [_m_or_none(m) for m in _read_doubles(b_io, nPoints)]


class MultiPoint(_MultiShape):
    shapeType = MULTIPOINT


class Polyline(_MultiShape):
    shapeType = POLYLINE
    hasParts = True


class Polygon(_MultiShape):
    shapeType = POLYGON
    hasParts = True


class MultiPointM(MultiPoint):
    shapeType = MULTIPOINTM
    hasM = True


class PolylineM(Polyline):
    shapeType = POLYLINEM
    hasM = True


class PolygonM(Polygon):
    shapeType = POLYGONM
    hasM = True


class MultiPointZ(MultiPoint):
    shapeType = MULTIPOINTZ
    hasZ = hasM = True


class PolylineZ(Polyline):
    shapeType = POLYLINEZ
    hasZ = hasM = True


class PolygonZ(Polygon):
    shapeType = POLYGONZ
    hasZ = hasM = True


class MultiPatch(_MultiShape):
    """A surface made of patches. partTypes holds the kind of each
    part (triangle strip, triangle fan, or one of the ring types)."""

    shapeType = MULTIPATCH
    hasParts = hasZ = hasM = True

    def _read_part_types(self, b_io: ReadSeekableBinStream, nParts: int) -> None:
        partTypes = _Array[int]("i", unpack(f"<{nParts}i", b_io.read(4 * nParts)))
        for partType in partTypes:
            if partType not in PARTTYPE_LOOKUP:
                raise FormatError(f"Unknown multipatch part type: {partType}")
        self.partTypes: Sequence[int] = partTypes


SHAPE_CLASS_FROM_SHAPETYPE: dict[int, type[Shape]] = {
    cls.shapeType: cls
    for cls in (
        NullShape,
        Point,
        Polyline,
        Polygon,
        MultiPoint,
        PointZ,
        PolylineZ,
        PolygonZ,
        MultiPointZ,
        PointM,
        PolylineM,
        PolygonM,
        MultiPointM,
        MultiPatch,
    )
}


def shape_class_for(shapeType: int) -> type[Shape]:
    """Returns the class of a shape type, or raises a FormatError
    for a type code the format does not define."""
    try:
        return SHAPE_CLASS_FROM_SHAPETYPE[shapeType]
    except KeyError:
        raise FormatError(f"Unsupported shape type: {shapeType}") from None


def decode_shape(
    shapeType: int, b_io: ReadSeekableBinStream, end: int, oid: int
) -> Shape:
    """Decodes the content of a record, positioned after its shape type."""
    return shape_class_for(shapeType).from_byte_stream(b_io, end, oid)
