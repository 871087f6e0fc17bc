from __future__ import annotations
import json
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from .models import PortStatus, ProcessAnalysis, now_iso
from .availability import is_port_available
from .utils import C

RULE = "─" * 30

SERVICE_GUESSES: Dict[int, str] = {
    3000: "frontend",
    3306: "mysql",
    4200: "frontend",
    5000: "backend",
    5173: "frontend",
    5432: "database",
    6379: "cache",
    8000: "backend",
    8080: "backend",
    8501: "streamlit",
    9000: "backend",
    9200: "search",
    27017: "mongodb",
}

IMPACT_BY_PORT: Dict[int, str] = {
    5432: "HIGH - Database service",
    3306: "HIGH - Database service",
    27017: "HIGH - Database service",
    6379: "MEDIUM - Cache/Search service",
    9200: "MEDIUM - Cache/Search service",
    8501: "MEDIUM - Streamlit application",
}
DEFAULT_IMPACT = "LOW - Development service"

RESOURCES_BY_PORT = {8501: "Streamlit App", 5173: "Vite Dev Server", 8000: "Python/Backend"}
RESOURCES_BY_PROCESS = {
    "postgres": "Database", "mysql": "Database", "mongod": "Database",
    "redis": "Cache",
    "node": "Application", "python": "Application", "java": "Application",
}

RISK_BY_PROCESS = {
    "postgres": "Data loss if terminated",
    "mysql": "Data loss if terminated",
    "mongod": "Data loss if terminated",
    "redis": "Session data loss",
    "python": "Service interruption",
    "node": "Service interruption",
    "java": "Service interruption",
}

ALTERNATIVE_PORTS = {3000: 3001, 5432: 5433, 6379: 6380, 8501: 8502, 8080: 8081}

FreeCheck = Callable[[int], bool]


def guess_service(port: int) -> str:
    return SERVICE_GUESSES.get(port, "service")


def assess_impact(status: PortStatus) -> str:
    return IMPACT_BY_PORT.get(status.port, DEFAULT_IMPACT)


def assess_resources(status: PortStatus) -> str:
    if status.is_available:
        return "Available"
    if status.port in RESOURCES_BY_PORT:
        return RESOURCES_BY_PORT[status.port]
    return RESOURCES_BY_PROCESS.get(status.process_name.lower(), "System")


def assess_risk(status: PortStatus) -> str:
    return RISK_BY_PROCESS.get(status.process_name.lower(), "Minimal impact")


def find_alternative_port(port: int, is_free: FreeCheck = is_port_available) -> Optional[int]:
    """First free port at or above the usual alternative for ``port``. Nothing is rebound."""
    candidate = ALTERNATIVE_PORTS.get(port, port + 1)
    while candidate <= 65535:
        if candidate != port and is_free(candidate):
            return candidate
        candidate += 1
    return None


def count_conflicts(statuses: Sequence[PortStatus]) -> int:
    return sum(1 for s in statuses if not s.is_available)


def _status_text(status: PortStatus) -> str:
    return "✅ READY" if status.is_available else "🔴 CONFLICT"


def _process_text(status: PortStatus) -> str:
    if status.is_available:
        return "-"
    if status.process_name and status.pid:
        return f"{status.process_name}:{status.pid}"
    if status.process_name:
        return status.process_name
    return "unknown" if status.error else "-"


def _or_dash(status: PortStatus, value: str) -> str:
    if status.is_available:
        return "-"
    return value or "unknown"


def format_simple(statuses: Sequence[PortStatus]) -> str:
    lines = [f"🔍 Scanning {len(statuses)} port(s)...", ""]
    for s in statuses:
        if s.is_available:
            lines.append(f"✅ Port {s.port}: Available")
        elif s.error:
            lines.append(f"🚨 Port {s.port}: Occupied - {s.error}")
        else:
            lines.append(f"🚨 Port {s.port}: Occupied by {s.process_name} (PID {s.pid})")
    return "\n".join(lines)


def _brief_row(*cols: str) -> str:
    return "{:<12} {:<6} {:<10} {:<16} {:<8} {:<8} {}".format(*cols)


def _all_clear() -> List[str]:
    return [
        "• All ports are available and ready for use! ✅",
        "• No conflicts detected - development environment is clear 🎉",
    ]


def format_table(statuses: Sequence[PortStatus], project: str = "project") -> str:
    lines = [f"PORT CONFLICT ANALYSIS: {project}", RULE, ""]
    lines.append(_brief_row("SERVICE", "PORT", "STATUS", "PROCESS", "IMPACT", "UPTIME", "RESOURCES"))
    lines.append(_brief_row("───────", "────", "──────", "───────", "──────", "──────", "─────────"))
    for s in statuses:
        impact = "-" if s.is_available else assess_impact(s).split(" ", 1)[0]
        lines.append(_brief_row(
            guess_service(s.port), str(s.port), _status_text(s), _process_text(s),
            impact, "-", assess_resources(s),
        ))

    conflicts = count_conflicts(statuses)
    lines.append("")
    if conflicts:
        lines.append(f"CONFLICT RESOLUTION ({conflicts} conflicts):")
        lines.append(f"{C.GREEN}1. PORT MAPPING{C.RESET}: Use alternative ports    ✅ RECOMMENDED")
        lines.append(f"{C.YELLOW}2. SERVICE RESTART{C.RESET}: Restart on new ports   ⚠️  LOW RISK")
        lines.append(f"{C.RED}3. PROCESS TERMINATION{C.RESET}: Stop services      🔴 HIGH RISK")
    else:
        lines.extend(_all_clear())
    return "\n".join(lines)


def _detailed_row(*cols: str) -> str:
    return "{:<12} {:<6} {:<10} {:<16} {:<6} {:<12} {:<8} {}".format(*cols)


def _analysis_lines(analysis: ProcessAnalysis) -> List[str]:
    lines = [f"  - Technology: {analysis.technology} ({analysis.service_type})"]
    if analysis.project_path:
        lines.append(f"  - Project: {analysis.project_path}")
        lines.extend(f"    {C.GRAY}{path}{C.RESET}" for path in analysis.config_files)
    if analysis.detected_ports:
        lines.append("  - Ports: " + ", ".join(str(p) for p in analysis.detected_ports))
    return lines


def format_detailed(
    statuses: Sequence[PortStatus],
    project: str = "project",
    analyses: Mapping[int, ProcessAnalysis] | None = None,
    is_free: FreeCheck = is_port_available,
) -> str:
    analyses = analyses or {}
    conflicts = [s for s in statuses if not s.is_available]

    lines = [f"DETAILED PORT ANALYSIS: {project}", RULE, ""]
    lines.append(_detailed_row("SERVICE", "PORT", "STATUS", "PROCESS", "PID", "USER", "MEMORY", "STARTED"))
    lines.append(_detailed_row("───────", "────", "──────", "───────", "───", "────", "──────", "───────"))
    for s in statuses:
        pid = str(s.pid) if s.pid and not s.is_available else "-"
        lines.append(_detailed_row(
            guess_service(s.port), str(s.port), _status_text(s),
            _or_dash(s, s.process_name), pid, _or_dash(s, s.user),
            _or_dash(s, s.memory_usage), _or_dash(s, s.start_time),
        ))

    lines += ["", "IMPACT ANALYSIS:"]
    if not conflicts:
        lines.extend(_all_clear())
    for s in conflicts:
        lines.append(f"• {C.RED}{guess_service(s.port)} ({s.port}): {assess_impact(s)}{C.RESET}")
        if s.error:
            lines.append(f"  - Error: {s.error}")
        else:
            lines.append(f"  - Process: {s.process_name} (PID {s.pid})")
            lines.append(f"  - User: {s.user}, Memory: {s.memory_usage}")
            lines.append(f"  - Started: {s.start_time}")
        if s.pid in analyses:
            lines.extend(_analysis_lines(analyses[s.pid]))
        lines.append(f"  - {C.YELLOW}Risk: {assess_risk(s)}{C.RESET}")
        lines.append("")

    if conflicts:
        lines.append(f"DETAILED RESOLUTION PATHS ({len(conflicts)} conflicts):")
        lines.append(f"\n{C.GREEN}1. PORT MAPPING (RECOMMENDED){C.RESET}")
        for s in conflicts:
            alt = find_alternative_port(s.port, is_free)
            lines.append(f"   {s.port} → {alt} (available)" if alt else f"   {s.port} → no free port above")
        lines.append("   Impact: Zero downtime, update configuration files")
        lines.append(f"\n{C.YELLOW}2. SERVICE RESTART (LOW RISK){C.RESET}")
        lines.append("   Restart services on alternative ports")
        lines.append("   Impact: Brief service interruption (1-2 minutes)")
        lines.append(f"\n{C.RED}3. PROCESS TERMINATION (HIGH RISK){C.RESET}")
        for s in conflicts:
            lines.append(f"   Stop: {s.process_name or 'unknown'} (PID {s.pid}) - {assess_risk(s)}")
        lines.append("   Impact: Service disruption, potential data loss")

    details = [s for s in conflicts if s.command_line]
    if details:
        lines += ["", "PROCESS DETAILS:"]
        for s in details:
            lines.append(f"• {s.process_name} (PID {s.pid}):")
            lines.append(f"  Command: {s.command_line}")
    return "\n".join(lines)


def format_json(
    statuses: Sequence[PortStatus],
    project: str = "project",
    analyses: Mapping[int, ProcessAnalysis] | None = None,
) -> str:
    analyses = analyses or {}
    ports = []
    for s in statuses:
        entry = s.to_dict()
        entry["service"] = guess_service(s.port)
        if s.pid in analyses:
            entry["analysis"] = analyses[s.pid].to_dict()
        ports.append(entry)
    payload = {
        "project": project,
        "conflicts": count_conflicts(statuses),
        "ports": ports,
        "timestamp": now_iso(),
    }
    return json.dumps(payload, indent=2)


FORMATS = ("simple", "table", "detailed", "json")


def render(
    statuses: Sequence[PortStatus],
    fmt: str = "table",
    project: str = "project",
    analyses: Mapping[int, ProcessAnalysis] | None = None,
) -> str:
    if fmt == "simple":
        return format_simple(statuses)
    if fmt == "table":
        return format_table(statuses, project)
    if fmt == "detailed":
        return format_detailed(statuses, project, analyses)
    if fmt == "json":
        return format_json(statuses, project, analyses)
    raise ValueError(f"Unsupported format: {fmt}")
