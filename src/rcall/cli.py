""" Command line client: read lines from standard input, issue each one as a
    call against a fixed object/function pair, and print the output. The
    first failure of any kind is reported on standard error and ends the
    process with a non-zero exit status.
"""

import argparse
import logging
import sys

import zmq

from . import config
from . import connection
from .driver import RequestDriver
from .errors import (
    ConnectError,
    CorrelationError,
    DisconnectError,
    LoopError,
    RcallError,
    RemoteError,
    SubmissionError,
)


EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def build_parser():

    # -h is the host, as it is for the other cluster tools; help is only
    # available via the long option.

    parser = argparse.ArgumentParser(
        prog='rcall',
        description='Call a function on a replicated object for each line of standard input.',
        add_help=False,
    )

    connect = parser.add_argument_group('Connect to a cluster')
    connect.add_argument(
        '-h', '--host',
        default=config.host(),
        help='connect to an IP address or hostname (default: %(default)s)',
    )
    connect.add_argument(
        '-p', '--port',
        default=config.port(),
        help='connect to an alternative port (default: %(default)s)',
    )
    connect.add_argument(
        '--connect-timeout',
        type=float,
        default=None,
        metavar='SECONDS',
        help='give up connecting after this many seconds',
    )

    manipulate = parser.add_argument_group('Manipulate an object')
    manipulate.add_argument(
        '-o', '--object',
        default=config.object_name(),
        help='manipulate a specific object (default: "%(default)s")',
    )
    manipulate.add_argument(
        '-f', '--function',
        default=config.function_name(),
        help='call a specific function (default: "%(default)s")',
    )
    manipulate.add_argument(
        '--timeout',
        type=int,
        default=-1,
        metavar='MS',
        help='wait at most this many milliseconds for each call (default: wait forever)',
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='log debug output to stderr')
    parser.add_argument('--help', action='help', help='show this help message and exit')

    return parser



def main(argv=None, stdin=None, stdout=None, stderr=None):
    """ Entry point for the ``rcall`` console script. Returns the process
        exit status.
    """

    if stdin is None:
        stdin = sys.stdin.buffer
    if stdout is None:
        stdout = sys.stdout.buffer
    if stderr is None:
        stderr = sys.stderr

    parser = build_parser()
    arguments = parser.parse_args(argv)

    if arguments.verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, stream=stderr,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    def report(message):
        stderr.write(message + '\n')
        stderr.flush()

    try:
        host = config.check_host(arguments.host)
        port = config.check_port(arguments.port)
    except ValueError as e:
        report(str(e))
        return EXIT_FAILURE

    if arguments.object == '' or arguments.function == '':
        report('the object and function names must not be empty')
        return EXIT_FAILURE

    try:
        session = connection.connect(host, port, arguments.connect_timeout)
    except ConnectError as e:
        report('could not connect: ' + e.description)
        return EXIT_FAILURE
    except ValueError as e:
        report(str(e))
        return EXIT_FAILURE
    except zmq.ZMQError as e:
        report('system error: ' + str(e))
        return EXIT_FAILURE

    driver = RequestDriver(session, timeout=arguments.timeout)

    try:
        for line in stdin:
            if line.endswith(b'\n'):
                line = line[:-1]

            # The backend treats payloads as NUL-terminated strings.

            payload = line + b'\0'

            try:
                output = driver.execute(arguments.object, arguments.function, payload)
            except SubmissionError as e:
                report('could not send request: ' + str(e))
                return EXIT_FAILURE
            except LoopError as e:
                report('could not loop: ' + str(e))
                return EXIT_FAILURE
            except CorrelationError:
                report('could not process request: internal error')
                return EXIT_FAILURE
            except RemoteError as e:
                report('could not process request: ' + str(e))
                return EXIT_FAILURE

            stdout.write(output + b'\n')
            stdout.flush()

        connection.disconnect(session)

    except DisconnectError as e:
        report('error disconnecting from cluster: ' + str(e))
        return EXIT_FAILURE
    except (zmq.ZMQError, OSError) as e:
        report('system error: ' + str(e))
        return EXIT_FAILURE
    except RcallError as e:
        report('error: ' + str(e))
        return EXIT_FAILURE

    return EXIT_SUCCESS


if __name__ == '__main__':
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
