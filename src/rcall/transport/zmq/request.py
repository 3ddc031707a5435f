"""ZeroMQ request/completion session.

A :class:`Client` issues calls over a DEALER socket and collects completions
from it. Nothing happens in the background: responses are only pulled off the
socket while :meth:`Client.loop` is running, which keeps the session strictly
single-threaded. Any number of calls may be outstanding; the backend may
complete them in any order, and :meth:`Client.loop` reports whichever
completion arrives first.
"""

from __future__ import annotations

import atexit
import collections
import logging
import time
from typing import Deque, Dict, Optional, Set, Tuple

import zmq
import zmq.utils.monitor

from ...buffer import ResultBuffer
from ...protocol import Call, Response, Ticker
from ...returncode import ReturnCode
from ..base import Session
from .framing import FramingError, from_response_frames, to_call_frames


logger = logging.getLogger(__name__)

zmq_context = zmq.Context()


class Client(Session):
    """Issue calls via a ZeroMQ DEALER socket and receive completions.
    Maintains a persistent connection to a single backend; the *address* and
    *port* number must be specified. The constructor does not wait for the
    connection to be established, see :meth:`wait_connected`.

    :ivar pending: Outstanding calls, keyed by request id.
    :ivar completed: Responses received but not yet reported by :meth:`loop`.
    :ivar lost: Request ids abandoned by a disconnect that :meth:`loop` has
        not yet reported. A reconnect does not bring them back.
    """

    def __init__(self, address: str, port: int):

        port = int(port)
        self.port = port
        self.address = address
        self.last_error: Optional[str] = None

        server = "tcp://%s:%d" % (address, port)
        identity = "request.Client.%d" % (id(self))

        self.socket = zmq_context.socket(zmq.DEALER)
        self.socket.setsockopt(zmq.LINGER, 0)

        # Only queue outgoing messages on a completed connection. Without
        # this a send with no backend present is silently held forever,
        # and the admission status would be meaningless.

        self.socket.setsockopt(zmq.IMMEDIATE, 1)
        self.socket.identity = identity.encode()

        self.monitor = self.socket.get_monitor_socket()
        self.connected = False
        self.closed = False

        self.pending: Dict[int, Call] = dict()
        self.completed: Deque[Response] = collections.deque()
        self.lost: Set[int] = set()
        self.buffers: Set[ResultBuffer] = set()
        self.ticker = Ticker()

        logger.debug("connecting to %s", server)
        self.socket.connect(server)


    @property
    def is_open(self) -> bool:
        return self.closed == False and self.connected == True


    def _fail(self, status: ReturnCode, description: str):
        self.last_error = description
        return -1, status


    def _monitor_events(self, timeout: int = 0) -> None:
        """Process any socket monitor events that are ready, waiting up to
        *timeout* milliseconds for the first one. A disconnect abandons every
        outstanding call: the backend that held them is gone.
        """

        while self.monitor.poll(timeout):
            timeout = 0
            event = zmq.utils.monitor.recv_monitor_message(self.monitor)
            event_code = event['event']

            if event_code in (zmq.EVENT_CONNECTED, zmq.EVENT_HANDSHAKE_SUCCEEDED):
                if self.connected == False:
                    logger.debug("connected to %s:%d", self.address, self.port)
                self.connected = True
            elif event_code == zmq.EVENT_DISCONNECTED:
                logger.debug("disconnected from %s:%d", self.address, self.port)
                self.connected = False
                if self.pending:
                    logger.warning("abandoning %d outstanding call(s) after losing %s:%d",
                                   len(self.pending), self.address, self.port)
                self.lost.update(self.pending)
                self.pending.clear()
            elif event_code == zmq.EVENT_MONITOR_STOPPED:
                break


    def wait_connected(self, timeout: float) -> bool:
        """Block for up to *timeout* seconds until the transport reports an
        established connection. Returns True if it did.

        The TCP connection alone is not enough: with IMMEDIATE set the socket
        only accepts a call once the protocol handshake is complete, which
        is what the POLLOUT check confirms.
        """

        deadline = time.monotonic() + timeout

        while True:
            self._monitor_events()

            if self.connected and self.socket.poll(0, zmq.POLLOUT):
                return True

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False

            if self.connected:
                self.socket.poll(min(10, max(1, int(remaining * 1000))), zmq.POLLOUT)
            else:
                self.monitor.poll(min(100, max(1, int(remaining * 1000))))


    def submit(self, object: str, function: str, payload: bytes) -> Tuple[int, ReturnCode]:
        """Put a call on the wire and return (request id, status). The status
        describes admission only; the outcome arrives through :meth:`loop`.
        """

        if self.closed:
            return self._fail(ReturnCode.CONNECTION_LOST, "session is disconnected")

        self._monitor_events()

        if self.connected == False:
            return self._fail(ReturnCode.CONNECTION_LOST,
                              "not connected to %s:%d" % (self.address, self.port))

        call = Call(self.ticker.next(self.pending), object, function, payload)

        try:
            self.socket.send_multipart(to_call_frames(call), flags=zmq.NOBLOCK)
        except zmq.Again:
            return self._fail(ReturnCode.CONNECTION_LOST,
                              "no connection to %s:%d accepted the call" % (self.address, self.port))

        self.pending[call.id] = call
        logger.debug("submitted %r", call)
        return call.id, ReturnCode.SUCCESS


    def _rep_incoming(self, parts) -> None:
        """Correlate an incoming response with its outstanding call. Responses
        for calls that are no longer outstanding are discarded.
        """

        try:
            response = from_response_frames(parts)
        except FramingError as e:
            logger.warning("discarding malformed response: %s", e)
            return

        try:
            del self.pending[response.id]
        except KeyError:
            logger.warning("discarding completion for unknown request %d", response.id)
            return

        self.completed.append(response)


    def _deliver(self) -> Tuple[int, ReturnCode, Optional[ResultBuffer]]:
        response = self.completed.popleft()
        logger.debug("completed %r", response)

        if response.status != ReturnCode.SUCCESS:
            self.last_error = response.description()
            return response.id, response.status, None

        buffer = ResultBuffer(response.output, response.id)
        self.buffers.add(buffer)
        return response.id, response.status, buffer


    def _report_lost(self) -> Tuple[int, ReturnCode, None]:
        logger.debug("reporting %d abandoned call(s)", len(self.lost))
        self.lost.clear()
        id, status = self._fail(ReturnCode.CONNECTION_LOST,
                                "lost connection to %s:%d" % (self.address, self.port))
        return id, status, None


    def loop(self, timeout: int = -1) -> Tuple[int, ReturnCode, Optional[ResultBuffer]]:
        """Wait for any outstanding call to complete. The *timeout* is in
        milliseconds; a negative value blocks indefinitely, zero polls without
        blocking.
        """

        if self.closed:
            id, status = self._fail(ReturnCode.CONNECTION_LOST, "session is disconnected")
            return id, status, None

        if self.completed:
            return self._deliver()

        if self.lost:
            return self._report_lost()

        if not self.pending:
            id, status = self._fail(ReturnCode.NONE_PENDING, "no calls are outstanding")
            return id, status, None

        if timeout is None or timeout < 0:
            deadline = None
        else:
            deadline = time.monotonic() + timeout / 1000.0

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)
        poller.register(self.monitor, zmq.POLLIN)

        while True:
            if deadline is None:
                wait = None
            else:
                wait = max(0, int((deadline - time.monotonic()) * 1000))

            ready = dict(poller.poll(wait))

            # Drain the data socket before looking at monitor events; any
            # response that made it here preceded the disconnect.

            if self.socket in ready:
                while True:
                    try:
                        parts = self.socket.recv_multipart(flags=zmq.NOBLOCK)
                    except zmq.Again:
                        break
                    self._rep_incoming(parts)

            if self.completed:
                return self._deliver()

            if self.monitor in ready:
                self._monitor_events()

                # The transport may already have reconnected by the time the
                # events are read; the abandoned calls stay lost regardless.

                if self.lost:
                    return self._report_lost()

            if deadline is not None and time.monotonic() >= deadline:
                id, status = self._fail(ReturnCode.TIMEOUT,
                                        "no completion within %d ms" % (timeout))
                return id, status, None


    def release(self, buffer: ResultBuffer) -> None:
        buffer.release()
        self.buffers.discard(buffer)


    def disconnect(self) -> ReturnCode:
        """Close the socket. Calls still outstanding are abandoned."""

        if self.closed:
            self.last_error = "session is already disconnected"
            return ReturnCode.CONNECTION_LOST

        if self.pending:
            logger.warning("disconnecting with %d outstanding call(s)", len(self.pending))

        unreleased = [buffer for buffer in self.buffers if buffer.released == False]
        if unreleased:
            logger.warning("disconnecting with %d unreleased result buffer(s)", len(unreleased))
        self.buffers.clear()

        self.closed = True
        self.connected = False
        self.pending.clear()
        self.completed.clear()
        self.lost.clear()

        self.socket.disable_monitor()
        self.monitor.close()
        self.socket.close()

        logger.debug("disconnected from %s:%d", self.address, self.port)
        return ReturnCode.SUCCESS


def _cleanup() -> None:
    # destroy() closes any socket a caller neglected to disconnect; term()
    # alone would block on it forever.
    try:
        zmq_context.destroy(linger=0)
    except zmq.ZMQError:
        pass


atexit.register(_cleanup)
