""" Exceptions raised while driving a call from submission to completion.
    Every exception carries the :class:`ReturnCode` that triggered it and a
    description suitable for a diagnostic message.
"""

from .returncode import ReturnCode, describe


class RcallError(Exception):
    """ Base class for all rcall errors.

        :ivar status: The :class:`ReturnCode` associated with the failure.
        :ivar description: Human-readable explanation of the failure.
    """

    def __init__(self, status, description=None):

        status = ReturnCode(status)

        if description is None or description == '':
            description = describe(status)

        self.status = status
        self.description = description
        Exception.__init__(self, self.__str__())


    def __str__(self):
        return '%s (%s)' % (self.description, self.status.name)


class SubmissionError(RcallError):
    """ The transport refused to admit the call. """


class LoopError(RcallError):
    """ Waiting for a completion failed before any completion arrived. """


class TimeoutCondition(LoopError):
    """ No completion arrived within the requested timeout. The call is still
        outstanding; a caller using bounded waits may wait for it again.
    """


class CorrelationError(RcallError):
    """ The completion that arrived does not belong to the call being waited
        on. This is an internal consistency violation and is not retriable.

        :ivar expected: The request identifier being waited on.
        :ivar received: The identifier reported by the completion.
    """

    def __init__(self, expected, received):

        self.expected = expected
        self.received = received

        description = 'completion %d arrived while waiting for %d' % (received, expected)
        RcallError.__init__(self, ReturnCode.INTERNAL, description)


class RemoteError(RcallError):
    """ The call completed, and the remote outcome was a failure. """


class ConnectError(RcallError):
    """ The session could not be established. """


class DisconnectError(RcallError):
    """ The session could not be torn down cleanly. """


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
