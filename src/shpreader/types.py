from __future__ import annotations

from os import PathLike
from typing import IO, Any, Optional, Protocol, TypeVar, Union

## Custom type variables

T = TypeVar("T")
Point2D = tuple[float, float]

PointsT = list[Point2D]

BBox = tuple[float, float, float, float]
ZBox = tuple[float, float]
MBox = tuple[Optional[float], Optional[float]]


class ReadableBinStream(Protocol):
    def read(self, size: int = -1) -> bytes: ...


class ReadSeekableBinStream(Protocol):
    def seek(self, offset: int, whence: int = 0) -> int: ...
    def tell(self) -> int: ...
    def read(self, size: int = -1) -> bytes: ...


# File name, file object or anything with a read() method that returns bytes.
BinaryFileT = Union[str, PathLike[Any], IO[bytes]]
