''' Wrapper module to select the most performant available library to handle
    the equivalent of :func:`json.loads` and :func:`json.dumps`. The response
    metadata frame on the wire is the only JSON that rcall handles.
'''

# msgspec is an optional extra; orjson is always installed alongside rcall.

msgspec = None
orjson = None

try:
    import msgspec
except ImportError:
    import orjson


# The msgspec 'encode' operation returns bytes, as does orjson.dumps. Both
# 'loads' methods accept either bytes or str.

if msgspec is not None:
    encoder = msgspec.json.Encoder()
    decoder = msgspec.json.Decoder()
    dumps = encoder.encode
    loads = decoder.decode
else:
    dumps = orjson.dumps
    loads = orjson.loads

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
