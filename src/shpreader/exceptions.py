class ShapefileException(Exception):
    """An exception to handle shapefile specific problems."""


class FormatError(ShapefileException):
    """The bytes read do not follow the shapefile or dbf layout."""
