"""
Shared fixtures for portwho tests.

FakeTools stands in for the process-listing facilities so the scanner and
analyzer run without lsof, ps or psutil touching real processes.
"""

import logging
import socket

import pytest

from portwho.errors import NoProcessFound, ToolError

LSOF_OWNER_SAMPLE = """\
COMMAND   PID  USER   FD   TYPE             DEVICE SIZE/OFF NODE NAME
python   4242 alice    3u  IPv4 0x1a2b3c4d5e6f7081      0t0  TCP *:8000 (LISTEN)
python   4242 alice    4u  IPv6 0x1a2b3c4d5e6f7082      0t0  TCP *:8000 (LISTEN)
"""

LSOF_DESCRIPTOR_SAMPLE = """\
COMMAND   PID  USER   FD   TYPE             DEVICE SIZE/OFF NODE NAME
node     5151 alice   21u  IPv4 0x1a2b3c4d5e6f7091      0t0  TCP *:3000 (LISTEN)
node     5151 alice   22u  IPv6 0x1a2b3c4d5e6f7092      0t0  TCP *:3000 (LISTEN)
node     5151 alice   23u  IPv4 0x1a2b3c4d5e6f7093      0t0  UDP *:*
node     5151 alice   24u  IPv4 0x1a2b3c4d5e6f7094      0t0  TCP 127.0.0.1:9229 (LISTEN)
"""


class FakeTools:
    """In-memory ProcessTools: owners by port, attributes and ports by pid."""

    def __init__(self, owners=None, attributes=None, ports=None, owner_error=None, ports_error=None):
        self.owners = owners or {}
        self.attributes = attributes or {}
        self.ports = ports or {}
        self.owner_error = owner_error
        self.ports_error = ports_error
        self.calls = []

    def find_port_owner(self, port):
        self.calls.append(("owner", port))
        if self.owner_error:
            raise self.owner_error
        if port not in self.owners:
            raise NoProcessFound()
        return self.owners[port]

    def query_attribute(self, pid, attribute):
        self.calls.append(("attr", pid, attribute))
        value = self.attributes.get(pid, {}).get(attribute)
        if value is None:
            raise ToolError(f"no {attribute} for {pid}")
        return value

    def process_ports(self, pid):
        self.calls.append(("ports", pid))
        if self.ports_error:
            raise self.ports_error
        return list(self.ports.get(pid, []))


@pytest.fixture
def held_port():
    """A port held by a listener on all interfaces for the test's duration."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("", 0))
    sock.listen(1)
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


@pytest.fixture
def free_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind(("", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.fixture
def node_tools():
    return FakeTools(
        owners={3000: ("node", 5151)},
        attributes={
            5151: {
                "name": "node",
                "user": "alice",
                "command": "node server.js",
                "rss": "204800",
                "start": "Sat Oct 17 09:30:00 2026",
            },
        },
        ports={5151: [3000, 9229]},
    )


@pytest.fixture(autouse=True)
def reset_portwho_logger():
    """The CLI installs a stderr handler; drop it so captured streams don't leak between tests."""
    yield
    logger = logging.getLogger("portwho")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
