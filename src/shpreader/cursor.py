from __future__ import annotations

import logging
from typing import Final

from .constants import VERBOSE
from .exceptions import FormatError
from .types import ReadSeekableBinStream

logger = logging.getLogger(__name__)


class ReaderState:
    """A bare bones 'enum' of the states of a ShapeReader.
    Only forward transitions are made: READY -> EXHAUSTED or READY -> ERRORED."""

    READY: Final = "READY"
    EXHAUSTED: Final = "EXHAUSTED"
    ERRORED: Final = "ERRORED"


class _Cursor:
    """Wraps a binary file and remembers the first error met while
    reading it. Once an error is latched every further read or seek
    re-raises that same error without touching the file again.
    I/O on a closed file (a ValueError) is latched like any OSError.
    """

    def __init__(self, f: ReadSeekableBinStream, length: int):
        self.f = f
        self.length = length
        self.state: str = ReaderState.READY
        self.error: Exception | None = None

    def __repr__(self) -> str:
        return f"_Cursor(state={self.state}, length={self.length})"

    def _check(self) -> None:
        if self.error is not None:
            raise self.error

    def latch(self, error: Exception) -> None:
        """Records the first error. Later errors are ignored."""
        if self.error is not None:
            return
        self.error = error
        self.state = ReaderState.ERRORED
        if VERBOSE:
            logger.warning("Stopped reading shapes: %s", error)

    def read(self, size: int) -> bytes:
        """Reads exactly size bytes, or latches and raises a FormatError."""
        self._check()
        try:
            data = self.f.read(size)
        except (OSError, ValueError) as e:
            self.latch(e)
            raise
        if len(data) != size:
            error = FormatError(
                f"Truncated record: expected {size} bytes at offset "
                f"{self.f.tell() - len(data)}, got {len(data)}"
            )
            self.latch(error)
            raise error
        return data

    def seek(self, offset: int) -> int:
        self._check()
        try:
            return self.f.seek(offset)
        except (OSError, ValueError) as e:
            self.latch(e)
            raise

    def tell(self) -> int:
        self._check()
        try:
            return self.f.tell()
        except (OSError, ValueError) as e:
            self.latch(e)
            raise

    def at_end(self) -> bool:
        """True once the cursor has reached the length given by the file header.
        Moves a READY cursor to EXHAUSTED."""
        if self.state != ReaderState.READY:
            return True
        if self.tell() >= self.length:
            self.state = ReaderState.EXHAUSTED
            return True
        return False
