""" A class representation of the two messages exchanged with the backend:
    the :class:`Call` issued by a client, and the :class:`Response` the
    backend returns once the call completes.
"""

import itertools
import time as timemodule

from ..returncode import ReturnCode, coerce


# This is the version of the on-the-wire protocol implemented here; it is
# identified by a single byte.

version = b'a'


class Call:
    """ A single named remote invocation. The fields are in order of how they
        are represented on the wire: the request identification number, the
        *object* and *function* names, and the opaque *payload* bytes.

        A :class:`Call` is immutable once constructed; the session assigns the
        identification number before the call is put on the wire.

        :ivar id: The request identifier assigned by the session.
        :ivar timestamp: A UNIX epoch timestamp for the creation of the call.
    """

    __slots__ = ('id', 'object', 'function', 'payload', 'timestamp')

    def __init__(self, id, object, function, payload=b''):

        if object is None or object == '':
            raise ValueError('the object name must be specified')

        if function is None or function == '':
            raise ValueError('the function name must be specified')

        if not isinstance(object, str) or not isinstance(function, str):
            raise TypeError('object and function names must be strings')

        if payload is None:
            payload = b''
        else:
            try:
                payload = payload.encode()
            except AttributeError:
                # Assume it is already bytes.
                payload = bytes(payload)

        setter = super().__setattr__
        setter('id', int(id))
        setter('object', object)
        setter('function', function)
        setter('payload', payload)
        setter('timestamp', timemodule.time())


    def __setattr__(self, name, value):
        raise AttributeError('Call instances are immutable')


    def __repr__(self):
        return 'CALL %d: %s.%s(%s)' % (self.id, self.object, self.function, repr(self.payload))


# end of class Call



class Response:
    """ The completion of a :class:`Call`, as reported by the backend. The
        *status* is always a :class:`ReturnCode`; *output* is only meaningful
        for a successful call, and *error* is a dictionary with 'type' and
        'text' keys describing a failure, if any.
    """

    def __init__(self, id, status=ReturnCode.GARBAGE, output=b'', error=None, time=None):

        if time is None:
            time = timemodule.time()

        self.id = int(id)
        self.status = coerce(status)
        self.output = output
        self.error = error
        self.time = time


    def __repr__(self):
        return 'REP %d: %s' % (self.id, self.status.name)


    def description(self):
        """ Return the error text attached to this response, or None if
            the backend did not provide any.
        """

        error = self.error

        if error is None:
            return None

        try:
            text = error['text']
        except (KeyError, TypeError):
            return str(error)

        try:
            kind = error['type']
        except KeyError:
            return text

        if kind:
            return '%s: %s' % (kind, text)
        return text


# end of class Response



class Ticker:
    """ Allocate request identification numbers for a single session. The
        sequence starts at 1; identifiers are never reused while a call using
        them is still outstanding.
    """

    minimum = 1
    maximum = 2 ** 63 - 1

    def __init__(self):
        self.counter = itertools.count(self.minimum)


    def next(self, outstanding=()):
        """ Return the next identifier not present in *outstanding*, which is
            expected to be a container of the identifiers currently in use.
        """

        while True:
            id = next(self.counter)

            if id >= self.maximum:
                self.counter = itertools.count(self.minimum)

            if id > self.maximum:
                continue

            if id in outstanding:
                continue

            return id


# end of class Ticker


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
