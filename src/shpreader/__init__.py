"""
shpreader
Provides read support for ESRI Shapefiles: typed shapes from the .shp
file, and random access to the attribute values of the .dbf file.
Compatible with Python versions >=3.9
"""

from __future__ import annotations

import logging

from .__version__ import __version__
from .classes import Field, FileHeader, ShapeRecord, Shapes
from .constants import (
    FIRST_RING,
    INNER_RING,
    MULTIPATCH,
    MULTIPOINT,
    MULTIPOINTM,
    MULTIPOINTZ,
    NODATA,
    NULL,
    OUTER_RING,
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
    RING,
    SHAPETYPE_LOOKUP,
    TRIANGLE_FAN,
    TRIANGLE_STRIP,
)
from .cursor import ReaderState
from .dbf import Table
from .exceptions import FormatError, ShapefileException
from .helpers import fsdecode_if_pathlike
from .reader import Reader
from .shapes import (
    SHAPE_CLASS_FROM_SHAPETYPE,
    MultiPatch,
    MultiPoint,
    MultiPointM,
    MultiPointZ,
    NullShape,
    Point,
    PointM,
    PointZ,
    Polygon,
    PolygonM,
    PolygonZ,
    Polyline,
    PolylineM,
    PolylineZ,
    Shape,
)
from .shp import ShapeReader
from .types import BBox, BinaryFileT, MBox, Point2D, PointsT, ZBox

__all__ = [
    "__version__",
    "NULL",
    "POINT",
    "POLYLINE",
    "POLYGON",
    "MULTIPOINT",
    "POINTZ",
    "POLYLINEZ",
    "POLYGONZ",
    "MULTIPOINTZ",
    "POINTM",
    "POLYLINEM",
    "POLYGONM",
    "MULTIPOINTM",
    "MULTIPATCH",
    "SHAPETYPE_LOOKUP",
    "TRIANGLE_STRIP",
    "TRIANGLE_FAN",
    "OUTER_RING",
    "INNER_RING",
    "FIRST_RING",
    "RING",
    "PARTTYPE_LOOKUP",
    "NODATA",
    "Reader",
    "ShapeReader",
    "ReaderState",
    "Table",
    "fsdecode_if_pathlike",
    "Shape",
    "NullShape",
    "Point",
    "Polyline",
    "Polygon",
    "MultiPoint",
    "MultiPointM",
    "MultiPointZ",
    "PolygonM",
    "PolygonZ",
    "PolylineM",
    "PolylineZ",
    "MultiPatch",
    "PointM",
    "PointZ",
    "SHAPE_CLASS_FROM_SHAPETYPE",
    "Point2D",
    "PointsT",
    "BBox",
    "MBox",
    "ZBox",
    "BinaryFileT",
    "ShapefileException",
    "FormatError",
    "Field",
    "FileHeader",
    "Shapes",
    "ShapeRecord",
]

logger = logging.getLogger(__name__)
