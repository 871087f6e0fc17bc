from __future__ import annotations
import errno
import logging
import socket
from typing import List, Tuple

log = logging.getLogger(__name__)

# the address cannot exist on this host, e.g. IPv6 loopback switched off
UNAVAILABLE_ERRNOS = {errno.EADDRNOTAVAIL, errno.EAFNOSUPPORT}


def _bind_targets(host: str) -> List[Tuple[int, str]]:
    if host:
        return [(socket.AF_INET6 if ":" in host else socket.AF_INET, host)]
    targets = []
    if socket.has_ipv6:
        targets.append((socket.AF_INET6, "::"))
    targets += [(socket.AF_INET, ""), (socket.AF_INET, "127.0.0.1")]
    if socket.has_ipv6:
        targets.append((socket.AF_INET6, "::1"))
    return targets


def _try_bind(family: int, host: str, port: int) -> bool | None:
    """True if bound and released, False if refused, None if the address does not exist here."""
    try:
        sock = socket.socket(family, socket.SOCK_STREAM)
    except OSError as e:
        log.debug("no socket for family %d: %s", family, e)
        return None
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        if family == socket.AF_INET6 and host == "::":
            # dual-stack, so IPv4 and IPv6 listeners both conflict
            sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
        sock.bind((host, port))
        sock.listen(1)
    except OSError as e:
        if e.errno in UNAVAILABLE_ERRNOS:
            log.debug("%s unavailable for bind: %s", host or "*", e)
            return None
        log.debug("bind on %s:%d failed: %s", host or "*", port, e)
        return False
    finally:
        sock.close()
    return True


def is_port_available(port: int, host: str = "") -> bool:
    """Bind a throwaway TCP listener on ``port`` and release it straight away.

    An empty ``host`` checks the dual-stack wildcard plus the IPv4 wildcard
    and both loopback addresses, so a listener on any of them is seen. Any
    bind failure counts as occupied: the OS error does not tell "in use"
    apart from "not permitted".
    """
    bound = False
    for family, address in _bind_targets(host):
        result = _try_bind(family, address, port)
        if result is False:
            return False
        bound = bound or bool(result)
    return bound
