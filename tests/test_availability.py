import socket

import pytest

from portwho.models import PortStatus
from portwho.availability import is_port_available
from portwho.scanner import PortScanner
from tests.conftest import FakeTools


def _listen(family, address, v6only=None):
    try:
        sock = socket.socket(family, socket.SOCK_STREAM)
    except OSError:
        pytest.skip("address family not supported")
    try:
        if v6only is not None:
            sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, v6only)
        sock.bind((address, 0))
        sock.listen(1)
    except OSError:
        sock.close()
        pytest.skip(f"cannot listen on {address}")
    return sock


def test_free_port_is_available(free_port):
    assert is_port_available(free_port) is True


def test_held_port_is_not_available(held_port):
    assert is_port_available(held_port) is False


def test_check_releases_the_port(free_port):
    assert is_port_available(free_port)
    assert is_port_available(free_port)


@pytest.mark.parametrize("family, address, v6only", [
    (socket.AF_INET, "127.0.0.1", None),
    (socket.AF_INET6, "::1", None),
    (socket.AF_INET6, "::", 1),
], ids=["ipv4-loopback", "ipv6-loopback", "ipv6-only-wildcard"])
def test_listener_on_any_address_is_seen(family, address, v6only):
    if family == socket.AF_INET6 and not socket.has_ipv6:
        pytest.skip("no IPv6 support")
    sock = _listen(family, address, v6only)
    try:
        port = sock.getsockname()[1]
        assert is_port_available(port) is False
    finally:
        sock.close()


def test_explicit_host(free_port):
    assert is_port_available(free_port, host="127.0.0.1") is True


def test_free_port_status_has_no_process_fields(free_port):
    tools = FakeTools()
    status = PortScanner(tools).check_port(free_port)
    assert status == PortStatus(port=free_port, is_available=True)
    assert status.process_name == ""
    assert status.pid == 0
    assert status.error == ""
    # no attribution attempted
    assert tools.calls == []
