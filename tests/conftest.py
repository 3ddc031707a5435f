import pytest
import socket

import rcall

import unitbackend


@pytest.fixture
def backend():

    server = unitbackend.Backend()
    yield server
    server.stop()


@pytest.fixture
def held_backend():

    server = unitbackend.Backend(hold=True)
    yield server
    server.stop()


@pytest.fixture
def session(backend):

    client = rcall.connect('127.0.0.1', backend.port, timeout=5)
    yield client

    if client.closed == False:
        client.disconnect()


@pytest.fixture
def held_session(held_backend):

    client = rcall.connect('127.0.0.1', held_backend.port, timeout=5)
    yield client

    if client.closed == False:
        client.disconnect()


@pytest.fixture
def unused_port():
    """ A port number with nothing listening on it. """

    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(('127.0.0.1', 0))
    port = probe.getsockname()[1]
    probe.close()

    return port


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
