""" Python client for issuing calls against named objects on a replicated
    backend. A call is submitted, its completion is collected later through
    a generic completion loop, and the two are matched by request id.
"""

# Utility components.

from . import json
from . import config
from . import returncode
from . import errors
from . import buffer

# Submodules used by multiple other components.

from . import protocol
from . import transport

# Primary public-facing interfaces.

from . import connection
connect = connection.connect
disconnect = connection.disconnect

from .buffer import ResultBuffer
from .driver import RequestDriver
from .errors import (
    RcallError,
    SubmissionError,
    LoopError,
    TimeoutCondition,
    CorrelationError,
    RemoteError,
    ConnectError,
    DisconnectError,
)
from .returncode import ReturnCode, describe

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
