"""Transport layer implementations."""

import os

from .base import Session

_BACKEND = os.environ.get("RCALL_TRANSPORT", "zmq")

if _BACKEND == "zmq":
    from .zmq import request
    from .zmq import framing
else:
    raise ImportError(f"unknown RCALL_TRANSPORT backend: {_BACKEND!r}")
