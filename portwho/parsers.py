"""
Parsers for raw process-listing output.

Everything here is pure: text in, structured values out. The functions are
fed by :class:`portwho.tools.LsofTools` and tested against captured samples.
"""
from __future__ import annotations
from typing import Iterable, List, Tuple

from .errors import NoProcessFound

# COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME
NAME_COLUMN = 8


def _data_lines(text: str) -> List[str]:
    lines = text.strip().splitlines()
    return [line for line in lines[1:] if line.strip()]


def parse_owner_listing(text: str) -> Tuple[str, int]:
    """Return ``(process_name, pid)`` from the first parseable row."""
    for line in _data_lines(text):
        fields = line.split()
        if len(fields) < 2:
            continue
        try:
            pid = int(fields[1])
        except ValueError:
            continue
        return fields[0], pid
    raise NoProcessFound()


def port_from_address(address: str) -> int | None:
    """``*:3000 (LISTEN)`` -> 3000, ``*:*`` -> None."""
    idx = address.rfind(":")
    if idx == -1:
        return None
    port_str = address[idx + 1:].split(" ", 1)[0].split("(", 1)[0].strip()
    if not port_str or port_str == "*":
        return None
    try:
        return int(port_str)
    except ValueError:
        return None


def unique_ports(ports: Iterable[int | None]) -> List[int]:
    out: List[int] = []
    for port in ports:
        if port is not None and port not in out:
            out.append(port)
    return out


def parse_descriptor_ports(text: str) -> List[int]:
    """Ports named in an ``lsof -i`` listing, first-seen order, no duplicates."""
    found = []
    for line in _data_lines(text):
        fields = line.split()
        if len(fields) <= NAME_COLUMN:
            continue
        found.append(port_from_address(" ".join(fields[NAME_COLUMN:])))
    return unique_ports(found)


def parse_cwd_listing(text: str) -> str:
    # lsof -Fn: one field per line, the name field is prefixed with "n"
    for line in text.splitlines():
        if line.startswith("n") and len(line) > 1:
            return line[1:]
    return ""


def normalize_memory(raw_kb: str) -> str:
    raw_kb = raw_kb.strip()
    try:
        return f"{int(raw_kb) // 1024}MB"
    except ValueError:
        return raw_kb + "KB"
