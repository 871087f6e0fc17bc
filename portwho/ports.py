from __future__ import annotations
import logging
from typing import Iterable, List

log = logging.getLogger(__name__)


def _parse_range(part: str) -> List[int]:
    bounds = part.split("-")
    if len(bounds) != 2:
        raise ValueError(part)
    start, end = int(bounds[0]), int(bounds[1])
    if start < 1 or end > 65535 or start > end:
        raise ValueError(part)
    return list(range(start, end + 1))


def parse_ports(args: Iterable[str]) -> List[int]:
    """
    Turns command-line port arguments into a list of ports.
    Supports:
    - Single ports: "3000"
    - Ranges: "3000-3010"
    - Comma-separated groups of either: "22,80,8000-8005"
    Invalid items are skipped with a warning. Input order is kept and
    duplicates are not removed.
    """
    ports: List[int] = []
    for arg in args:
        for part in arg.split(","):
            part = part.strip()
            if not part:
                continue
            if "-" in part:
                try:
                    ports.extend(_parse_range(part))
                except ValueError:
                    log.warning("Skipping invalid port range: %s", part)
                continue
            try:
                port = int(part)
            except ValueError:
                port = 0
            if port < 1 or port > 65535:
                log.warning("Skipping invalid port: %s", part)
                continue
            ports.append(port)
    return ports
