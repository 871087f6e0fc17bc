"""
Process-listing capabilities.

``ProcessTools`` is what the scanner and analyzer talk to. ``LsofTools``
shells out to ``lsof``/``ps`` and hands the raw text to :mod:`portwho.parsers`;
``PsutilTools`` reads the same facts through psutil.
"""
from __future__ import annotations
import datetime as dt
import logging
import subprocess
import sys
from typing import List, Protocol, Sequence, Tuple

import psutil

from .errors import NoProcessFound, ToolError
from .parsers import (
    parse_cwd_listing,
    parse_descriptor_ports,
    parse_owner_listing,
    unique_ports,
)

log = logging.getLogger(__name__)

ATTRIBUTES = ("name", "user", "command", "rss", "start", "cwd")
START_TIME_FORMAT = "%a %b %d %H:%M:%S %Y"  # same shape as ps -o lstart


class ProcessTools(Protocol):
    def find_port_owner(self, port: int) -> Tuple[str, int]: ...
    def query_attribute(self, pid: int, attribute: str) -> str: ...
    def process_ports(self, pid: int) -> List[int]: ...


def run_command(args: Sequence[str], ok_codes: Sequence[int] = (0,)) -> str:
    log.debug("running %s", " ".join(args))
    try:
        proc = subprocess.run(list(args), capture_output=True, text=True, check=False)
    except OSError as e:
        raise ToolError(f"{args[0]}: {e}") from e
    if proc.returncode not in ok_codes:
        detail = proc.stderr.strip() or f"exit status {proc.returncode}"
        raise ToolError(f"{args[0]}: {detail}")
    return proc.stdout


class LsofTools:
    # ps -o field names per attribute
    PS_FIELDS = {
        "name": "comm",
        "user": "user",
        "command": "command",
        "rss": "rss",
        "start": "lstart",
    }

    def find_port_owner(self, port: int) -> Tuple[str, int]:
        # lsof exits 1 when nothing matches; the parser reports that case
        out = run_command(["lsof", "-i", f":{port}", "-P"], ok_codes=(0, 1))
        return parse_owner_listing(out)

    def query_attribute(self, pid: int, attribute: str) -> str:
        if attribute == "cwd":
            out = run_command(["lsof", "-a", "-p", str(pid), "-d", "cwd", "-Fn"], ok_codes=(0, 1))
            return parse_cwd_listing(out)
        if attribute not in self.PS_FIELDS:
            raise ValueError(f"Unknown process attribute: {attribute}")
        out = run_command(["ps", "-p", str(pid), "-o", f"{self.PS_FIELDS[attribute]}="])
        return out.strip()

    def process_ports(self, pid: int) -> List[int]:
        out = run_command(["lsof", "-a", "-p", str(pid), "-i", "-P", "-n"], ok_codes=(0, 1))
        return parse_descriptor_ports(out)


class PsutilTools:
    def find_port_owner(self, port: int) -> Tuple[str, int]:
        try:
            conns = psutil.net_connections(kind="inet")
        except psutil.Error as e:
            raise ToolError(f"net_connections: {e}") from e
        for conn in conns:
            if not conn.laddr or conn.laddr.port != port or not conn.pid:
                continue
            try:
                return psutil.Process(conn.pid).name(), conn.pid
            except psutil.NoSuchProcess:
                continue
            except psutil.Error as e:
                raise ToolError(f"pid {conn.pid}: {e}") from e
        raise NoProcessFound()

    def query_attribute(self, pid: int, attribute: str) -> str:
        if attribute not in ATTRIBUTES:
            raise ValueError(f"Unknown process attribute: {attribute}")
        try:
            p = psutil.Process(pid)
            if attribute == "name":
                return p.name()
            if attribute == "user":
                return p.username()
            if attribute == "command":
                return " ".join(p.cmdline())
            if attribute == "rss":
                return str(p.memory_info().rss // 1024)
            if attribute == "start":
                return dt.datetime.fromtimestamp(p.create_time()).strftime(START_TIME_FORMAT)
            return p.cwd()
        except psutil.Error as e:
            raise ToolError(f"pid {pid} {attribute}: {e}") from e

    def process_ports(self, pid: int) -> List[int]:
        try:
            conns = psutil.Process(pid).net_connections(kind="inet")
        except psutil.Error as e:
            raise ToolError(f"pid {pid} connections: {e}") from e
        return unique_ports(c.laddr.port for c in conns if c.laddr)


BACKENDS = {
    "lsof": LsofTools,
    "psutil": PsutilTools,
}


def get_tools(backend: str = "auto") -> ProcessTools:
    if backend == "auto":
        # psutil.net_connections needs root on macOS and the BSDs
        backend = "lsof" if sys.platform == "darwin" or "bsd" in sys.platform else "psutil"
    if backend not in BACKENDS:
        raise ValueError(f"Unknown backend: {backend}")
    return BACKENDS[backend]()
