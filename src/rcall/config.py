""" Configuration defaults for rcall. Every default can be overridden by an
    environment variable; the command line options in :mod:`rcall.cli` take
    precedence over both.

    ======================= ===================== ===============
    Setting                 Environment variable  Default
    ======================= ===================== ===============
    backend host            RCALL_HOST            127.0.0.1
    backend port            RCALL_PORT            1982
    object name             RCALL_OBJECT          echo
    function name           RCALL_FUNCTION        func
    connect timeout (sec)   RCALL_CONNECT_TIMEOUT 5.0
    ======================= ===================== ===============
"""

import os


default_host = '127.0.0.1'
default_port = 1982
default_object = 'echo'
default_function = 'func'
default_connect_timeout = 5.0


def _environment(name, default):

    value = os.environ.get(name)

    if value is None or value == '':
        return default

    return value



def host():
    return _environment('RCALL_HOST', default_host)


def port():
    return _environment('RCALL_PORT', default_port)


def object_name():
    return _environment('RCALL_OBJECT', default_object)


def function_name():
    return _environment('RCALL_FUNCTION', default_function)


def connect_timeout():
    """ Return the connect timeout in seconds as a float. A malformed value
        in the environment raises :class:`ValueError`.
    """

    timeout = _environment('RCALL_CONNECT_TIMEOUT', default_connect_timeout)

    try:
        timeout = float(timeout)
    except ValueError:
        raise ValueError('invalid connect timeout: ' + repr(timeout))

    if timeout < 0:
        raise ValueError('the connect timeout cannot be negative')

    return timeout



def check_host(host):
    """ Confirm the *host* is usable as a connection target, returning it
        as a string.
    """

    if host is None:
        raise ValueError('the host must be specified')

    host = str(host).strip()

    if host == '':
        raise ValueError('the host must be specified')

    if any(character.isspace() for character in host):
        raise ValueError('invalid host: ' + repr(host))

    return host



def check_port(port):
    """ Confirm the *port* is a valid TCP port number, returning it as an
        integer.
    """

    try:
        port = int(port)
    except (TypeError, ValueError):
        raise ValueError('invalid port: ' + repr(port))

    if port <= 0 or port >= 65536:
        raise ValueError('port number to connect to must be in (0, 65536): ' + str(port))

    return port


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
