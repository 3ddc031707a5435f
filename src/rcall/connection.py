""" Establish and tear down the session used to issue calls. There is no
    retry at this layer; a caller wanting one is expected to wrap
    :func:`connect` with its own policy.
"""

import logging

from . import config
from . import transport
from .errors import ConnectError, DisconnectError
from .returncode import ReturnCode


logger = logging.getLogger(__name__)


def connect(host=None, port=None, timeout=None):
    """ Return a connected :class:`rcall.transport.Session` for the backend
        at *host* and *port*, defaulting to the values from :mod:`rcall.config`.
        Wait up to *timeout* seconds for the connection to be established
        before raising :class:`ConnectError`.
    """

    if host is None:
        host = config.host()
    if port is None:
        port = config.port()
    if timeout is None:
        timeout = config.connect_timeout()

    host = config.check_host(host)
    port = config.check_port(port)

    session = transport.request.Client(host, port)

    if session.wait_connected(timeout):
        return session

    # Connecting is asynchronous; don't leave the socket retrying forever
    # in the background once we've given up on it.

    session.disconnect()

    description = 'no backend reachable at %s:%d after %.1f seconds' % (host, port, timeout)
    logger.debug(description)
    raise ConnectError(ReturnCode.CONNECTION_LOST, description)



def disconnect(session):
    """ Disconnect the *session*, raising :class:`DisconnectError` if the
        teardown did not succeed. This should be called exactly once.
    """

    status = session.disconnect()

    if status != ReturnCode.SUCCESS:
        raise DisconnectError(status, session.describe_last(status))

    return status


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
