from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple
import datetime as dt

UNKNOWN = "unknown"


@dataclass(frozen=True)
class PortStatus:
    port: int
    is_available: bool = False
    process_name: str = ""
    pid: int = 0
    user: str = ""
    command_line: str = ""
    memory_usage: str = ""
    start_time: str = ""
    error: str = ""

    def __post_init__(self) -> None:
        if not 1 <= self.port <= 65535:
            raise ValueError(f"Port out of range: {self.port}")

    @property
    def is_attributed(self) -> bool:
        return not self.is_available and self.pid > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProjectRoot:
    path: str = ""
    markers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ProcessAnalysis:
    pid: int
    name: str = ""
    command_line: str = ""
    working_dir: str = ""
    user: str = ""
    technology: str = UNKNOWN
    service_type: str = "system"
    detected_ports: Tuple[int, ...] = field(default_factory=tuple)
    project_path: str = ""
    config_files: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["detected_ports"] = list(self.detected_ports)
        data["config_files"] = list(self.config_files)
        return data


def now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()
