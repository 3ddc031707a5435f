""" The :class:`RequestDriver` ties submission and completion together for
    synchronous callers: submit one call, wait specifically for *its*
    completion, and hand back the output or raise a descriptive exception.

    The session's :func:`loop` reports whichever outstanding call completes
    first, not necessarily the one the caller is interested in. The driver
    therefore always compares the completed identifier against the one it
    is waiting for; with the default of a single outstanding call, a mismatch
    can only mean something is broken.
"""

import logging

from .errors import CorrelationError, LoopError, RemoteError, SubmissionError, TimeoutCondition
from .returncode import ReturnCode


logger = logging.getLogger(__name__)


class RequestDriver:
    """ Drive calls over the supplied *session* to completion. The *timeout*,
        in milliseconds, is the default wait applied by :func:`wait`; the
        default of -1 blocks indefinitely.

        *max_outstanding* bounds the number of calls that may be in flight
        at once through this driver. When it is greater than one, completions
        that arrive for a different outstanding call are parked in a slot
        until :func:`wait` is invoked for that call.

        :ivar slots: Outstanding request ids mapped to their parked
            completion, or None if the completion has not arrived yet.
    """

    def __init__(self, session, timeout=-1, max_outstanding=1):

        max_outstanding = int(max_outstanding)

        if max_outstanding < 1:
            raise ValueError('max_outstanding must be at least 1')

        self.session = session
        self.timeout = timeout
        self.max_outstanding = max_outstanding
        self.slots = dict()


    def __enter__(self):
        return self


    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


    def execute(self, object, function, payload=b''):
        """ Submit a single call, wait for its completion, and return the
            output bytes.
        """

        request_id = self.submit(object, function, payload)
        return self.wait(request_id)


    def submit(self, object, function, payload=b''):
        """ Submit a call and return its request identifier. Raises
            :class:`SubmissionError` if the session refuses the call; in that
            case there is nothing to wait for.
        """

        if len(self.slots) >= self.max_outstanding:
            raise RuntimeError('already waiting on %d outstanding call(s)' % (len(self.slots)))

        request_id, status = self.session.submit(object, function, payload)

        if request_id < 0:
            raise SubmissionError(status, self.session.describe_last(status))

        self.slots[request_id] = None
        return request_id


    def wait(self, request_id, timeout=None):
        """ Block until the call identified by *request_id* completes, and
            return its output. A :class:`TimeoutCondition` leaves the call
            outstanding, so a caller using a bounded *timeout* may invoke
            :func:`wait` again; every other exception resolves the call.
        """

        if request_id not in self.slots:
            raise KeyError('request %s is not outstanding' % (repr(request_id)))

        if timeout is None:
            timeout = self.timeout

        while self.slots[request_id] is None:
            completed, status, buffer = self.session.loop(timeout)

            if completed < 0:
                description = self.session.describe_last(status)

                if status == ReturnCode.TIMEOUT:
                    raise TimeoutCondition(status, description)

                # The wait itself failed; none of the outstanding calls can
                # be expected to complete on this session.

                self._abandon()
                raise LoopError(status, description)

            if completed == request_id or (completed in self.slots and self.slots[completed] is None):
                description = None
                if status != ReturnCode.SUCCESS:
                    description = self.session.describe_last(status)
                self.slots[completed] = (status, buffer, description)
            else:
                # Nothing submitted through this driver matches. Release
                # the stray buffer without looking at it.

                if buffer is not None:
                    self.session.release(buffer)

                del self.slots[request_id]
                logger.debug('completion %d arrived while waiting for %d', completed, request_id)
                raise CorrelationError(request_id, completed)

        return self._resolve(*self.slots.pop(request_id))


    def _resolve(self, status, buffer, description):

        if status != ReturnCode.SUCCESS:
            if buffer is not None:
                self.session.release(buffer)
            raise RemoteError(status, description)

        if buffer is None:
            raise LoopError(ReturnCode.INTERNAL, 'session reported success without a result buffer')

        try:
            output = buffer.tobytes()
        finally:
            self.session.release(buffer)

        return output


    def _abandon(self):
        for request_id in list(self.slots):
            parked = self.slots.pop(request_id)
            if parked is not None and parked[1] is not None:
                self.session.release(parked[1])


    def close(self):
        """ Release any parked buffers and forget every outstanding call.
            The session itself is left untouched.
        """

        if self.slots:
            logger.debug('forgetting %d outstanding call(s)', len(self.slots))

        self._abandon()


# end of class RequestDriver


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
