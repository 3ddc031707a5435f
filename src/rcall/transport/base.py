"""Session interface.

This is the (small) contract that transport implementations follow, and the
only surface the request driver relies on. It lives outside
:mod:`rcall.protocol` so the protocol remains transport-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from ..buffer import ResultBuffer
from ..returncode import ReturnCode, describe


class Session(ABC):
    """Minimal contract for a live connection to the backend.

    Request identifiers are non-negative integers; any negative identifier
    returned by :meth:`submit` or :meth:`loop` is a sentinel accompanied by a
    status explaining why no identifier is available.
    """

    last_error: Optional[str] = None

    @abstractmethod
    def submit(self, object: str, function: str, payload: bytes) -> Tuple[int, ReturnCode]:
        """Issue a call, returning (request id, admission status)."""

    @abstractmethod
    def loop(self, timeout: int = -1) -> Tuple[int, ReturnCode, Optional[ResultBuffer]]:
        """Wait up to *timeout* milliseconds for any outstanding call to
        complete; negative blocks indefinitely, zero does not block.
        Returns (completion id, status, buffer or None)."""

    @abstractmethod
    def disconnect(self) -> ReturnCode:
        """Tear down the connection."""

    def release(self, buffer: ResultBuffer) -> None:
        """Release a buffer handed out by :meth:`loop`."""
        buffer.release()

    def describe(self, status) -> str:
        """Human-readable description of *status*."""
        return describe(status)

    def describe_last(self, status) -> str:
        """The most recent failure description, falling back to
        :meth:`describe` when the session has nothing more specific."""
        if self.last_error:
            return self.last_error
        return self.describe(status)

    @property
    def is_open(self) -> bool:
        """Whether the session is currently usable."""
        return False
