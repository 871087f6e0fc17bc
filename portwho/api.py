"""
JSON API for portwho - scan local ports and analyze owning processes over HTTP
"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Dict
import logging

import jwt
from flask import Flask, current_app, jsonify, request
from flask_cors import CORS

from .config import load_config
from .errors import ToolError
from .models import now_iso
from .ports import parse_ports
from .scanner import PortScanner, ProcessAnalyzer
from .tools import ProcessTools, get_tools

log = logging.getLogger(__name__)


def issue_token(secret: str, username: str = "portwho", hours: int = 24) -> str:
    return jwt.encode({
        "username": username,
        "exp": datetime.now(timezone.utc) + timedelta(hours=hours),
    }, secret, algorithm="HS256")


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        secret = current_app.config.get("API_SECRET")
        if not secret:
            return f(*args, **kwargs)
        token = request.headers.get("Authorization")
        if not token:
            return jsonify({"message": "Token is missing"}), 401
        if token.startswith("Bearer "):
            token = token[7:]
        try:
            jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            return jsonify({"message": "Token is invalid", "error": str(e)}), 401
        return f(*args, **kwargs)
    return decorated


def create_app(cfg: Dict[str, Any] | None = None, tools: ProcessTools | None = None) -> Flask:
    cfg = cfg or load_config(None)
    tools = tools or get_tools(cfg["backend"])
    scanner = PortScanner(tools, host=cfg["bind_host"], markers=cfg["project_markers"])
    analyzer = ProcessAnalyzer(tools, markers=cfg["project_markers"])

    app = Flask(__name__)
    app.config["API_SECRET"] = cfg.get("api_secret")
    CORS(app)

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "service": "portwho-api"})

    @app.route("/api/scan", methods=["GET"])
    @token_required
    def scan_ports():
        """Check ports given as ?ports=3000,5432-5433"""
        port_spec = request.args.get("ports", "")
        ports = parse_ports([port_spec])
        if not ports:
            return jsonify({"message": "No valid ports provided"}), 400
        statuses = scanner.scan(ports)
        return jsonify({
            "ports": [s.to_dict() for s in statuses],
            "conflicts": sum(1 for s in statuses if not s.is_available),
            "timestamp": now_iso(),
        })

    @app.route("/api/process/<int:pid>", methods=["GET"])
    @token_required
    def process_detail(pid):
        try:
            analysis = analyzer.analyze(pid)
        except ToolError as e:
            return jsonify({"message": "Process not found", "error": str(e)}), 404
        return jsonify(analysis.to_dict())

    return app


def run_api_server(cfg: Dict[str, Any], host: str | None = None, port: int | None = None) -> None:
    app = create_app(cfg)
    host = host or cfg["api_host"]
    port = port or int(cfg["api_port"])
    print(f"portwho API server running on http://{host}:{port}")
    print("Available endpoints:")
    print("  - GET /api/health")
    print("  - GET /api/scan?ports=3000,5432")
    print("  - GET /api/process/{pid}")
    if not cfg.get("api_secret"):
        log.warning("api_secret is not set; endpoints are unauthenticated")
    app.run(host=host, port=port)
