"""ZMQ multipart framing for calls and responses.

Call (DEALER -> ROUTER)
    (optional routing prefix...), version, id, b'CALL', object, function, payload

Response (ROUTER -> DEALER)
    (optional routing prefix...), version, id, b'REP', meta_json, output

The id is the request identifier as 16 lowercase hex digits. The meta frame
is a JSON object with 'status', 'time', and 'error' keys.
"""

from __future__ import annotations

import time
from typing import Optional, Sequence, Tuple

from ... import json
from ...protocol import Call, Response, version
from ...returncode import ReturnCode


CALL = b'CALL'
REP = b'REP'


class FramingError(ValueError):
    """A multipart message could not be interpreted."""


def encode_id(id: int) -> bytes:
    return b'%016x' % (id)


def decode_id(raw: bytes) -> int:
    try:
        return int(raw, 16)
    except (TypeError, ValueError) as exc:
        raise FramingError(f"invalid request id: {raw!r}") from exc


def to_call_frames(call: Call) -> Tuple[bytes, ...]:
    """Encode a Call as DEALER multipart frames."""

    return (
        version,
        encode_id(call.id),
        CALL,
        call.object.encode(),
        call.function.encode(),
        call.payload,
    )


def from_call_frames(parts: Sequence[bytes]) -> Tuple[Tuple[bytes, ...], Call]:
    """Decode ROUTER parts into (routing prefix, Call)."""

    if len(parts) < 6:
        raise FramingError("short call message: %d frames" % (len(parts)))

    # ROUTER sockets prepend the identity frame(s); the call itself is always
    # the final six frames.

    prefix = tuple(parts[:-6])
    their_version, raw_id, kind, object, function, payload = parts[-6:]

    if their_version != version:
        raise FramingError(
            f"message is protocol {their_version!r}, recipient expects {version!r}"
        )

    if kind != CALL:
        raise FramingError(f"unexpected message type: {kind!r}")

    call = Call(decode_id(raw_id), object.decode(), function.decode(), payload)
    return prefix, call


def to_response_frames(response: Response, prefix: Sequence[bytes] = ()) -> Tuple[bytes, ...]:
    """Encode a Response, with an optional ROUTER routing prefix."""

    meta = {
        "status": int(response.status),
        "time": response.time,
        "error": response.error,
    }

    output = response.output
    if output is None:
        output = b''

    parts = (
        version,
        encode_id(response.id),
        REP,
        json.dumps(meta),
        output,
    )
    return tuple(prefix) + parts


def from_response_frames(parts: Sequence[bytes]) -> Response:
    """Decode DEALER parts into a Response.

    A response from a peer speaking another protocol version is represented as
    an INTERNAL failure for the same request id, so that the error can reach
    the original caller.
    """

    if len(parts) < 2:
        raise FramingError("short response message: %d frames" % (len(parts)))

    their_version = parts[0]
    id = decode_id(parts[1])

    if their_version != version:
        error = {
            "type": "RuntimeError",
            "text": f"message is protocol {their_version!r}, recipient expects {version!r}",
        }
        return Response(id, ReturnCode.INTERNAL, b'', error)

    if len(parts) < 5:
        raise FramingError("short response message: %d frames" % (len(parts)))

    kind = parts[2]
    if kind != REP:
        raise FramingError(f"unexpected message type: {kind!r}")

    meta: Optional[dict]
    if parts[3] in (b'', None):
        meta = dict()
    else:
        meta = json.loads(parts[3])

    status = meta.get("status", ReturnCode.GARBAGE)
    error = meta.get("error")
    timestamp = meta.get("time") or time.time()

    return Response(id, status, bytes(parts[4]), error, timestamp)
