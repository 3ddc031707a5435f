""" Return codes attached to both the submission and the completion of a
    call. Every status holder starts out as :data:`ReturnCode.GARBAGE`; that
    value is never produced by a real outcome, which makes it obvious when a
    status is consulted before anything populated it.
"""

import enum


class ReturnCode(enum.IntEnum):

    SUCCESS = 0
    REMOTE_FAILURE = 1
    OBJ_NOT_FOUND = 2
    FUNC_NOT_FOUND = 3
    CONNECTION_LOST = 4
    TIMEOUT = 5
    NONE_PENDING = 6
    INTERNAL = 7
    GARBAGE = 255


# end of class ReturnCode


descriptions = dict()
descriptions[ReturnCode.SUCCESS] = 'operation succeeded'
descriptions[ReturnCode.REMOTE_FAILURE] = 'the remote function reported a failure'
descriptions[ReturnCode.OBJ_NOT_FOUND] = 'no such object on the backend'
descriptions[ReturnCode.FUNC_NOT_FOUND] = 'no such function on the object'
descriptions[ReturnCode.CONNECTION_LOST] = 'the connection to the backend was lost'
descriptions[ReturnCode.TIMEOUT] = 'no completion arrived before the timeout'
descriptions[ReturnCode.NONE_PENDING] = 'no calls are outstanding'
descriptions[ReturnCode.INTERNAL] = 'internal error'
descriptions[ReturnCode.GARBAGE] = 'status was never set'


def coerce(code):
    """ Translate an integer received from the wire into a :class:`ReturnCode`.
        Values outside the known set are reported as
        :data:`ReturnCode.INTERNAL` rather than raising, since the caller has
        a completion in hand and needs some status to attach to it.
    """

    try:
        return ReturnCode(int(code))
    except (TypeError, ValueError):
        return ReturnCode.INTERNAL


def describe(code):
    """ Return a human-readable description of the supplied *code*.
    """

    try:
        code = ReturnCode(code)
    except (TypeError, ValueError):
        return 'unknown return code %s' % (repr(code))

    return descriptions[code]


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
