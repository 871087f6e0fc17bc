"""
portwho - find out which local process is holding a TCP port,
what it is, and which project it belongs to.

CLI entry: portwho (see pyproject.toml)
"""

from .models import PortStatus, ProcessAnalysis, ProjectRoot
from .scanner import PortScanner, ProcessAnalyzer
from .classify import classify
from .project import find_project_root
from .tools import get_tools
from .errors import ToolError, NoProcessFound

__all__ = [
    "PortStatus",
    "ProcessAnalysis",
    "ProjectRoot",
    "PortScanner",
    "ProcessAnalyzer",
    "classify",
    "find_project_root",
    "get_tools",
    "ToolError",
    "NoProcessFound",
]

__version__ = "1.0.0"
