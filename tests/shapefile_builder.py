"""
Builds the bytes of small .shp and .dbf files for the tests,
following the layout of the ESRI Shapefile Technical Description.
"""

import struct

FILE_CODE = 9994
VERSION = 1000


def shp_header(
    shapeType,
    fileLength,
    bbox=(0.0, 0.0, 0.0, 0.0),
    zbox=(0.0, 0.0),
    mbox=(0.0, 0.0),
    fileCode=FILE_CODE,
    version=VERSION,
):
    """The 100 byte header. fileLength is in bytes."""
    header = struct.pack(">i20xi", fileCode, fileLength // 2)
    header += struct.pack("<2i", version, shapeType)
    header += struct.pack("<4d", *bbox)
    header += struct.pack("<2d", *zbox)
    header += struct.pack("<2d", *mbox)
    assert len(header) == 100
    return header


def shp_record(recNum, content, declared_length=None):
    """A record header followed by its content. The content length
    can be declared different from the actual one, in bytes."""
    if declared_length is None:
        declared_length = len(content)
    return struct.pack(">2i", recNum, declared_length // 2) + content


def shp_file(shapeType, contents, bbox=(0.0, 0.0, 0.0, 0.0), **header_kwargs):
    """A complete .shp file with one record per content."""
    body = b"".join(shp_record(i + 1, c) for i, c in enumerate(contents))
    fileLength = 100 + len(body)
    return shp_header(shapeType, fileLength, bbox=bbox, **header_kwargs) + body


def null_content():
    return struct.pack("<i", 0)


def point_content(x, y):
    return struct.pack("<i2d", 1, x, y)


def pointz_content(x, y, z, m=None):
    content = struct.pack("<i3d", 11, x, y, z)
    if m is not None:
        content += struct.pack("<d", m)
    return content


def pointm_content(x, y, m):
    return struct.pack("<i3d", 21, x, y, m)


def _bbox(points):
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return (min(xs), min(ys), max(xs), max(ys))


def _range_and_values(values):
    return struct.pack("<2d", min(values), max(values)) + struct.pack(
        f"<{len(values)}d", *values
    )


def _points(points):
    flat = [c for p in points for c in p]
    return struct.pack(f"<{len(flat)}d", *flat)


def multipoint_content(shapeType, points, z=None, m=None):
    content = struct.pack("<i", shapeType)
    content += struct.pack("<4d", *_bbox(points))
    content += struct.pack("<i", len(points))
    content += _points(points)
    if z is not None:
        content += _range_and_values(z)
    if m is not None:
        content += _range_and_values(m)
    return content


def poly_content(shapeType, parts, points, z=None, m=None, partTypes=None):
    """Content of a polyline, polygon or multipatch record."""
    content = struct.pack("<i", shapeType)
    content += struct.pack("<4d", *_bbox(points))
    content += struct.pack("<2i", len(parts), len(points))
    content += struct.pack(f"<{len(parts)}i", *parts)
    if partTypes is not None:
        content += struct.pack(f"<{len(partTypes)}i", *partTypes)
    content += _points(points)
    if z is not None:
        content += _range_and_values(z)
    if m is not None:
        content += _range_and_values(m)
    return content


def dbf_file(fields, records, terminator=True, encoding="utf-8"):
    """A .dbf file. fields are (name, type, size, decimal) tuples and
    records are lists of str values, padded with spaces to the field size."""
    headerLength = 32 + 32 * len(fields) + 1
    recordLength = 1 + sum(f[2] for f in fields)
    header = struct.pack(
        "<B3BLHH20x", 3, 95, 7, 26, len(records), headerLength, recordLength
    )
    for name, field_type, size, decimal in fields:
        encoded_name = name.encode("utf-8")[:10].ljust(11, b"\x00")
        header += struct.pack(
            "<11sc4xBB14x", encoded_name, field_type.encode("ascii"), size, decimal
        )
    header += b"\r" if terminator else b" "
    body = b""
    for record in records:
        body += b" "
        for (__name, field_type, size, __decimal), value in zip(fields, record):
            encoded = value.encode(encoding)
            if field_type in ("N", "F"):
                body += encoded.rjust(size, b" ")
            else:
                body += encoded.ljust(size, b" ")
    return header + body + b"\x1a"
