""" The transport-agnostic description of a call and its completion. Nothing
    in this package may depend on a transport implementation.
"""

from . import message

from .message import Call, Response, Ticker, version

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
