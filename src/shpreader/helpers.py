from __future__ import annotations

import array
import os
from os import PathLike
from struct import Struct
from typing import Any, Generic, TypeVar, overload

from .types import T

# Helpers

unpack_2_int32_be = Struct(">2i").unpack
unpack_int32_le = Struct("<i").unpack


@overload
def fsdecode_if_pathlike(path: PathLike[Any]) -> str: ...
@overload
def fsdecode_if_pathlike(path: T) -> T: ...
def fsdecode_if_pathlike(path: Any) -> Any:
    if isinstance(path, PathLike):
        return os.fsdecode(path)  # str

    return path


def strip_extension(path: str) -> str:
    """Returns the path without a trailing 3 character extension
    (e.g. ".shp", ".dbf" or ".abc"). Paths without one are returned as is."""
    base, ext = os.path.splitext(path)
    if len(ext) == 4:
        return base
    return path


ARR_TYPE = TypeVar("ARR_TYPE", int, float)


class _Array(array.array, Generic[ARR_TYPE]):  # type: ignore[type-arg]
    """Converts python tuples to lists of the appropriate type.
    Used to unpack the parts and coordinate arrays of a record."""

    def __repr__(self) -> str:
        return str(self.tolist())
