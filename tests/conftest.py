import pytest

from shapefile_builder import dbf_file, point_content, poly_content, shp_file

# shape type codes, as plain ints to keep the builder independent of shpreader
POINT = 1
POLYLINE = 3


@pytest.fixture
def write_shapefile(tmp_path):
    """Returns a function writing <name>.shp (and <name>.dbf if given)
    into a temporary directory, and returning the path without extension."""

    def write(name, shp_bytes=None, dbf_bytes=None):
        if shp_bytes is not None:
            (tmp_path / f"{name}.shp").write_bytes(shp_bytes)
        if dbf_bytes is not None:
            (tmp_path / f"{name}.dbf").write_bytes(dbf_bytes)
        return str(tmp_path / name)

    return write


@pytest.fixture
def point_shp():
    return shp_file(
        POINT,
        [point_content(10, 10), point_content(5, 5), point_content(0, 10)],
        bbox=(0, 5, 10, 10),
    )


@pytest.fixture
def polyline_shp():
    return shp_file(
        POLYLINE,
        [
            poly_content(POLYLINE, [0], [(0, 0), (5, 5), (10, 10)]),
            poly_content(POLYLINE, [0], [(15, 15), (20, 20), (25, 25)]),
        ],
        bbox=(0, 0, 25, 25),
    )


@pytest.fixture
def cities_dbf():
    fields = [("NAME", "C", 12, 0), ("POP", "N", 8, 0), ("RANK", "N", 3, 0)]
    records = [
        ["Oslo", "709037", "1"],
        ["Bergen", "285900", "2"],
        ["Trondheim", "212660", "3"],
    ]
    return dbf_file(fields, records)


@pytest.fixture
def cities(write_shapefile, point_shp, cities_dbf):
    return write_shapefile("cities", point_shp, cities_dbf)
