""" Exercise the ZeroMQ session against the threaded test backend defined in
    unitbackend.py.
"""

import time

import pytest
import zmq

import rcall
from rcall.returncode import ReturnCode
from rcall.transport.zmq import framing


def test_submit_and_loop(session):

    request_id, status = session.submit('echo', 'func', b'hello\0')
    assert status == ReturnCode.SUCCESS
    assert request_id == 1

    completed, status, buffer = session.loop(-1)
    assert completed == request_id
    assert status == ReturnCode.SUCCESS

    with buffer:
        assert buffer.tobytes() == b'hello'

    # Identifiers increase with each call.

    request_id, status = session.submit('echo', 'upper', b'again\0')
    completed, status, buffer = session.loop(5000)
    assert completed == request_id == 2
    assert buffer.tobytes() == b'AGAIN'
    session.release(buffer)

    with pytest.raises(BufferError):
        session.release(buffer)


def test_correlation(session):
    """ With no concurrent calls, the completion id always matches the id
        handed out by submit().
    """

    for count in range(20):
        payload = ('line %d' % (count)).encode()
        request_id, status = session.submit('echo', 'func', payload)
        completed, status, buffer = session.loop(-1)

        assert completed == request_id
        assert status == ReturnCode.SUCCESS
        assert buffer.tobytes() == payload
        session.release(buffer)


def test_remote_failures(session):

    request_id, status = session.submit('echo', 'fail', b'x\0')
    completed, status, buffer = session.loop(-1)
    assert completed == request_id
    assert status == ReturnCode.REMOTE_FAILURE
    assert buffer is None
    assert 'ValueError' in session.last_error

    request_id, status = session.submit('nothing', 'func', b'x\0')
    completed, status, buffer = session.loop(-1)
    assert status == ReturnCode.OBJ_NOT_FOUND

    request_id, status = session.submit('echo', 'nothing', b'x\0')
    completed, status, buffer = session.loop(-1)
    assert status == ReturnCode.FUNC_NOT_FOUND


def test_none_pending(session):

    begin = time.time()
    completed, status, buffer = session.loop(-1)
    elapsed = time.time() - begin

    assert completed < 0
    assert status == ReturnCode.NONE_PENDING
    assert buffer is None
    assert elapsed < 0.5


def test_poll_does_not_block(held_backend, held_session):

    request_id, status = held_session.submit('echo', 'func', b'x\0')
    assert status == ReturnCode.SUCCESS

    begin = time.time()
    completed, status, buffer = held_session.loop(0)
    elapsed = time.time() - begin

    assert completed < 0
    assert status == ReturnCode.TIMEOUT
    assert buffer is None
    assert elapsed < 0.1

    # A bounded wait gives up after roughly the requested time.

    begin = time.time()
    completed, status, buffer = held_session.loop(100)
    elapsed = time.time() - begin

    assert status == ReturnCode.TIMEOUT
    assert elapsed >= 0.09
    assert elapsed < 1

    # The call is still outstanding, and completes once answered.

    assert held_backend.wait_held(1)
    held_backend.answer()

    completed, status, buffer = held_session.loop(-1)
    assert completed == request_id
    assert buffer.tobytes() == b'x'
    held_session.release(buffer)


def test_out_of_order(held_backend, held_session):
    """ The backend is free to complete calls in any order; loop() reports
        each completion with the id of the call it belongs to.
    """

    ids = list()
    for payload in (b'one\0', b'two\0', b'three\0'):
        request_id, status = held_session.submit('echo', 'func', payload)
        ids.append(request_id)

    assert held_backend.wait_held(3)
    held_backend.answer((2, 0, 1))

    results = dict()
    for count in range(3):
        completed, status, buffer = held_session.loop(5000)
        assert status == ReturnCode.SUCCESS
        with buffer:
            results[completed] = buffer.tobytes()

    assert results == {ids[0]: b'one', ids[1]: b'two', ids[2]: b'three'}


def test_driver_correlation(held_backend, held_session):
    """ A completion for a call the driver did not submit surfaces as a
        correlation failure, not as the driver's own result.
    """

    stray_id, status = held_session.submit('echo', 'func', b'stray\0')
    assert held_backend.wait_held(1)

    driver = rcall.RequestDriver(held_session, timeout=5000)
    request_id = driver.submit('echo', 'func', b'mine\0')
    assert held_backend.wait_held(2)

    held_backend.answer((0, 1))

    with pytest.raises(rcall.CorrelationError) as caught:
        driver.wait(request_id)

    assert caught.value.expected == request_id
    assert caught.value.received == stray_id


def test_stale_completion(held_backend, held_session):
    """ Responses for ids that are not outstanding are discarded. """

    request_id, status = held_session.submit('echo', 'func', b'x\0')
    assert held_backend.wait_held(1)

    stale = rcall.protocol.Response(request_id + 100, ReturnCode.SUCCESS, b'stale')
    held_backend.send_raw(framing.to_response_frames(stale))
    held_backend.answer()

    completed, status, buffer = held_session.loop(5000)
    assert completed == request_id
    assert buffer.tobytes() == b'x'
    held_session.release(buffer)


def test_connection_lost(held_backend, held_session):

    request_id, status = held_session.submit('echo', 'func', b'x\0')
    assert held_backend.wait_held(1)

    held_backend.stop()

    completed, status, buffer = held_session.loop(5000)
    assert completed < 0
    assert status == ReturnCode.CONNECTION_LOST
    assert buffer is None

    # Nothing survives the lost connection.

    assert held_session.pending == dict()


def rebind(port):
    """ Listen on *port* again without ever answering, so that the client
        reconnects to a backend that knows nothing of its earlier calls.
    """

    socket = zmq.Context.instance().socket(zmq.ROUTER)
    socket.setsockopt(zmq.LINGER, 0)

    # The old listener is closed asynchronously; retry until the port frees.

    deadline = time.time() + 5
    while True:
        try:
            socket.bind('tcp://127.0.0.1:%d' % (port))
        except zmq.ZMQError:
            if time.time() > deadline:
                socket.close()
                raise
            time.sleep(0.05)
        else:
            return socket


def test_connection_lost_after_reconnect(held_backend, held_session):
    """ Calls abandoned by a disconnect are reported as lost even when the
        transport has already reconnected before the events are read.
    """

    driver = rcall.RequestDriver(held_session, timeout=5000)
    request_id = driver.submit('echo', 'func', b'x\0')
    assert held_backend.wait_held(1)

    held_backend.stop()
    replacement = rebind(held_backend.port)

    try:
        time.sleep(0.5)

        begin = time.time()
        with pytest.raises(rcall.LoopError) as caught:
            driver.wait(request_id)
        elapsed = time.time() - begin

        assert not isinstance(caught.value, rcall.TimeoutCondition)
        assert caught.value.status == ReturnCode.CONNECTION_LOST
        assert elapsed < 4

        # The loss is reported once; after that nothing is outstanding.

        completed, status, buffer = held_session.loop(0)
        assert status == ReturnCode.NONE_PENDING
    finally:
        replacement.close()


def test_connection_lost_seen_by_submit(held_backend, held_session):
    """ A disconnect noticed while submitting a new call still surfaces as a
        lost connection on the next loop, not as nothing pending.
    """

    request_id, status = held_session.submit('echo', 'func', b'x\0')
    assert held_backend.wait_held(1)

    held_backend.stop()
    replacement = rebind(held_backend.port)

    try:
        time.sleep(0.5)

        held_session.submit('echo', 'func', b'y\0')
        assert request_id not in held_session.pending

        completed, status, buffer = held_session.loop(5000)
        assert completed < 0
        assert status == ReturnCode.CONNECTION_LOST
    finally:
        replacement.close()


def test_disconnect(session):

    assert session.is_open == True
    assert session.disconnect() == ReturnCode.SUCCESS
    assert session.is_open == False

    request_id, status = session.submit('echo', 'func', b'x\0')
    assert request_id < 0
    assert status == ReturnCode.CONNECTION_LOST

    completed, status, buffer = session.loop(0)
    assert completed < 0
    assert status == ReturnCode.CONNECTION_LOST

    assert session.disconnect() == ReturnCode.CONNECTION_LOST


def test_empty_names(session):

    with pytest.raises(ValueError):
        session.submit('', 'func', b'x\0')

    with pytest.raises(ValueError):
        session.submit('echo', '', b'x\0')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
