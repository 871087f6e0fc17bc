from __future__ import annotations
import argparse
import json
import sys
from typing import Dict

from .config import load_config
from .errors import ToolError
from .formatter import FORMATS, render
from .models import ProcessAnalysis
from .ports import parse_ports
from .scanner import PortScanner, ProcessAnalyzer
from .tools import get_tools
from .utils import C, setup_logging


def cmd_scan(args: argparse.Namespace) -> int:
    cfg = args.cfg
    ports = parse_ports(args.ports)
    if not ports:
        print("❌ No valid ports provided", file=sys.stderr)
        return 2

    fmt = args.format or cfg["format"]
    project = args.project or cfg["project"]
    tools = get_tools(cfg["backend"])
    scanner = PortScanner(tools, host=cfg["bind_host"], markers=cfg["project_markers"])
    statuses = scanner.scan(ports)

    analyses: Dict[int, ProcessAnalysis] = {}
    if args.analyze:
        analyzer = ProcessAnalyzer(tools, markers=cfg["project_markers"])
        for status in statuses:
            if not status.is_attributed or status.pid in analyses:
                continue
            try:
                analyses[status.pid] = analyzer.analyze(status.pid)
            except ToolError as e:
                print(f"Could not analyze pid {status.pid}: {e}", file=sys.stderr)

    print(render(statuses, fmt, project, analyses))
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    cfg = args.cfg
    analyzer = ProcessAnalyzer(get_tools(cfg["backend"]), markers=cfg["project_markers"])
    try:
        a = analyzer.analyze(args.pid)
    except ToolError as e:
        print(f"Could not analyze pid {args.pid}: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(a.to_dict(), indent=2))
        return 0

    print(f"{C.CYAN}{a.name}{C.RESET} (PID {a.pid}) {C.GRAY}user={a.user}{C.RESET}")
    print(f"  Command:    {a.command_line}")
    print(f"  Directory:  {a.working_dir or '-'}")
    print(f"  Technology: {a.technology} ({a.service_type})")
    print(f"  Ports:      {', '.join(str(p) for p in a.detected_ports) or '-'}")
    print(f"  Project:    {a.project_path or '-'}")
    for path in a.config_files:
        print(f"    {C.GRAY}{path}{C.RESET}")
    return 0


def cmd_api(args: argparse.Namespace) -> int:
    from .api import run_api_server
    run_api_server(args.cfg, args.host, args.port)
    return 0


def cmd_token(args: argparse.Namespace) -> int:
    from .api import issue_token
    secret = args.cfg.get("api_secret")
    if not secret:
        print("api_secret is not set in the config", file=sys.stderr)
        return 1
    print(issue_token(secret, args.user, args.hours or int(args.cfg["token_hours"])))
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="portwho", description="portwho - who is holding my port?")
    ap.add_argument("--config", type=str, help="Config YAML")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_scan = sub.add_parser("scan", help="Check ports and attribute busy ones")
    p_scan.add_argument("ports", nargs="+", help="Ports: 3000 5432 or ranges 3000-3010")
    p_scan.add_argument("--format", choices=FORMATS, help="Output format (default: table)")
    p_scan.add_argument("--project", type=str, help="Project name for the report header")
    p_scan.add_argument("--analyze", action="store_true", help="Also analyze owning processes")
    p_scan.set_defaults(func=cmd_scan)

    p_an = sub.add_parser("analyze", help="Analyze a process by PID")
    p_an.add_argument("pid", type=int)
    p_an.add_argument("--json", action="store_true", help="Emit JSON")
    p_an.set_defaults(func=cmd_analyze)

    p_api = sub.add_parser("api", help="Run REST API server")
    p_api.add_argument("--host", type=str, help="Host to bind to")
    p_api.add_argument("--port", type=int, help="Port to bind to")
    p_api.set_defaults(func=cmd_api)

    p_tok = sub.add_parser("token", help="Issue an API bearer token")
    p_tok.add_argument("--user", type=str, default="portwho")
    p_tok.add_argument("--hours", type=int, help="Token lifetime")
    p_tok.set_defaults(func=cmd_token)

    return ap


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.cfg = load_config(args.config)
    setup_logging("DEBUG" if args.verbose else args.cfg["log_level"])
    return args.func(args)
