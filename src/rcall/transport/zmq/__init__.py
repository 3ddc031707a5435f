"""ZeroMQ DEALER/ROUTER transport."""

from . import framing
from . import request
