from __future__ import annotations
import logging
from typing import Iterable, List, Sequence, Tuple

from .classify import classify
from .enrich import enrich_process
from .errors import ToolError
from .models import PortStatus, ProcessAnalysis
from .availability import is_port_available
from .project import PROJECT_MARKERS, find_project_root
from .tools import ProcessTools

log = logging.getLogger(__name__)


class PortScanner:
    def __init__(self, tools: ProcessTools, host: str = "", markers: Sequence[str] = PROJECT_MARKERS):
        self.tools = tools
        self.host = host
        self.markers = markers

    def check_port(self, port: int) -> PortStatus:
        if is_port_available(port, self.host):
            return PortStatus(port=port, is_available=True)

        try:
            name, pid = self.tools.find_port_owner(port)
        except ToolError as e:
            log.warning("port %d is busy but its owner is unknown: %s", port, e)
            return PortStatus(port=port, is_available=False, error=str(e))

        log.debug("port %d held by %s (pid %d)", port, name, pid)
        return PortStatus(
            port=port,
            is_available=False,
            process_name=name,
            pid=pid,
            **enrich_process(pid, self.tools),
        )

    def scan(self, ports: Iterable[int]) -> List[PortStatus]:
        # one port at a time, in the order given
        return [self.check_port(port) for port in ports]

    def analyze_port(self, port: int) -> Tuple[PortStatus, ProcessAnalysis | None]:
        status = self.check_port(port)
        if not status.is_attributed:
            return status, None
        try:
            analysis = ProcessAnalyzer(self.tools, self.markers).analyze(status.pid)
        except ToolError as e:
            log.warning("could not analyze pid %d: %s", status.pid, e)
            return status, None
        return status, analysis


class ProcessAnalyzer:
    def __init__(self, tools: ProcessTools, markers: Sequence[str] = PROJECT_MARKERS):
        self.tools = tools
        self.markers = markers

    def _working_dir(self, pid: int) -> str:
        try:
            return self.tools.query_attribute(pid, "cwd")
        except ToolError as e:
            log.debug("pid %d: no working directory: %s", pid, e)
            return ""

    def _ports(self, pid: int) -> Tuple[int, ...]:
        try:
            return tuple(self.tools.process_ports(pid))
        except ToolError as e:
            log.warning("pid %d: could not list network descriptors: %s", pid, e)
            return ()

    def analyze(self, pid: int) -> ProcessAnalysis:
        """Raises :class:`ToolError` when name, command line or owner cannot be read."""
        name = self.tools.query_attribute(pid, "name")
        command_line = self.tools.query_attribute(pid, "command")
        user = self.tools.query_attribute(pid, "user")
        working_dir = self._working_dir(pid)

        technology, service_type = classify(name, command_line)
        project = find_project_root(working_dir, self.markers)

        return ProcessAnalysis(
            pid=pid,
            name=name,
            command_line=command_line,
            working_dir=working_dir,
            user=user,
            technology=technology,
            service_type=service_type,
            detected_ports=self._ports(pid),
            project_path=project.path,
            config_files=project.markers,
        )
