""" The :class:`ResultBuffer` holds the output of a successful call. It is
    handed out by the session alongside the completion that produced it, and
    must be released exactly once after the caller is done with it.
"""


class ResultBuffer:
    """ An owned region of bytes produced by a completed call. The contents
        are valid from the completion that produced them until :func:`release`
        is invoked; reading after release, or releasing a second time, raises
        :class:`BufferError`.

        Using the buffer as a context manager guarantees the release on every
        exit path::

            with buffer:
                output = buffer.tobytes()

        :ivar request_id: The identifier of the call that produced this buffer.
        :ivar released: True once :func:`release` has been invoked.
    """

    def __init__(self, data, request_id=None):

        self._data = bytearray(data)
        self._length = len(self._data)
        self.request_id = request_id
        self.released = False


    def __enter__(self):
        self._check()
        return self


    def __exit__(self, exc_type, exc_value, traceback):
        self.release()


    def __len__(self):
        self._check()
        return self._length


    def __repr__(self):
        if self.released:
            return '<ResultBuffer %s released>' % (repr(self.request_id))
        return '<ResultBuffer %s, %d bytes>' % (repr(self.request_id), self._length)


    def _check(self):
        if self.released:
            raise BufferError('result buffer used after release')


    def tobytes(self):
        """ Return a copy of the buffer contents. The copy remains valid after
            the buffer itself is released.
        """

        self._check()
        return bytes(self._data)


    def release(self):
        """ Release the buffer. The contents are discarded; any further use
            of this instance, including a second release, raises
            :class:`BufferError`.
        """

        if self.released:
            raise BufferError('result buffer released more than once')

        self.released = True
        self._data = None
        self._length = 0


# end of class ResultBuffer


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
