import pytest

import rcall
from rcall.protocol import Call, Response, Ticker
from rcall.returncode import ReturnCode
from rcall.transport.zmq import framing


def test_call():

    call = Call(1, 'echo', 'func', b'hello\0')
    assert call.id == 1
    assert call.object == 'echo'
    assert call.function == 'func'
    assert call.payload == b'hello\0'
    assert call.timestamp > 0

    with pytest.raises(AttributeError):
        call.payload = b'changed'

    # A string payload is encoded; None is an empty payload.

    assert Call(2, 'echo', 'func', 'text').payload == b'text'
    assert Call(3, 'echo', 'func', None).payload == b''


def test_call_names():

    with pytest.raises(ValueError):
        Call(1, '', 'func')

    with pytest.raises(ValueError):
        Call(1, 'echo', None)

    with pytest.raises(TypeError):
        Call(1, b'echo', 'func')


def test_ticker():

    ticker = Ticker()
    assert ticker.next() == 1
    assert ticker.next() == 2

    # Identifiers still outstanding are skipped.

    assert ticker.next(outstanding={3, 4}) == 5


def test_ticker_wrap():

    ticker = Ticker()
    ticker.counter = iter([Ticker.maximum - 1, Ticker.maximum])
    assert ticker.next() == Ticker.maximum - 1
    assert ticker.next() == Ticker.maximum

    # Wrapping restarts at the minimum, still avoiding outstanding ids.

    assert ticker.next(outstanding={1}) == 2


def test_response_description():

    response = Response(1, ReturnCode.REMOTE_FAILURE, b'', {'type': 'ValueError', 'text': 'nope'})
    assert response.description() == 'ValueError: nope'

    response = Response(1, ReturnCode.REMOTE_FAILURE, b'', {'text': 'nope'})
    assert response.description() == 'nope'

    response = Response(1, ReturnCode.SUCCESS, b'output')
    assert response.description() is None

    response = Response(1, 12345)
    assert response.status is ReturnCode.INTERNAL


def test_call_frames():

    call = Call(26, 'echo', 'func', b'hello\0')
    parts = framing.to_call_frames(call)

    assert parts[0] == rcall.protocol.version
    assert parts[1] == b'000000000000001a'
    assert parts[2] == framing.CALL
    assert parts[3:] == (b'echo', b'func', b'hello\0')

    # A ROUTER socket prepends the caller identity.

    prefix, decoded = framing.from_call_frames((b'identity',) + parts)
    assert prefix == (b'identity',)
    assert decoded.id == 26
    assert decoded.object == 'echo'
    assert decoded.function == 'func'
    assert decoded.payload == b'hello\0'


def test_response_frames():

    error = {'type': 'ValueError', 'text': 'nope'}
    response = Response(9, ReturnCode.REMOTE_FAILURE, b'', error)

    parts = framing.to_response_frames(response, (b'identity',))
    assert parts[0] == b'identity'

    decoded = framing.from_response_frames(parts[1:])
    assert decoded.id == 9
    assert decoded.status is ReturnCode.REMOTE_FAILURE
    assert decoded.output == b''
    assert decoded.error == error

    meta = rcall.json.loads(parts[4])
    assert meta['status'] == int(ReturnCode.REMOTE_FAILURE)
    assert 'time' in meta


def test_version_mismatch():
    """ A response from a peer speaking another protocol version still
        reaches the caller, as an internal error for the same request.
    """

    parts = (b'z', b'0000000000000005', b'REP', b'', b'')
    decoded = framing.from_response_frames(parts)

    assert decoded.id == 5
    assert decoded.status is ReturnCode.INTERNAL
    assert 'protocol' in decoded.description()

    with pytest.raises(framing.FramingError):
        framing.from_call_frames((b'identity', b'z', b'0000000000000005', b'CALL', b'echo', b'func', b''))


def test_malformed():

    with pytest.raises(framing.FramingError):
        framing.from_response_frames((rcall.protocol.version,))

    with pytest.raises(framing.FramingError):
        framing.from_response_frames((rcall.protocol.version, b'not hex', b'REP', b'', b''))

    with pytest.raises(framing.FramingError):
        framing.from_response_frames((rcall.protocol.version, b'01', b'CALL', b'', b''))

    with pytest.raises(framing.FramingError):
        framing.from_call_frames((b'too', b'short'))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
