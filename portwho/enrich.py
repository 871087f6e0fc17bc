import logging
from typing import Dict

from .errors import ToolError
from .models import UNKNOWN
from .parsers import normalize_memory
from .tools import ProcessTools

log = logging.getLogger(__name__)


def _query(tools: ProcessTools, pid: int, attribute: str) -> str:
    try:
        return tools.query_attribute(pid, attribute)
    except ToolError as e:
        log.debug("pid %d: %s lookup failed: %s", pid, attribute, e)
        return UNKNOWN


def enrich_process(pid: int, tools: ProcessTools) -> Dict[str, str]:
    """Owner, command line, memory and start time; each degrades to ``unknown`` on its own."""
    user = _query(tools, pid, "user")
    command_line = _query(tools, pid, "command")
    rss = _query(tools, pid, "rss")
    start_time = _query(tools, pid, "start")
    return {
        "user": user,
        "command_line": command_line,
        "memory_usage": rss if rss == UNKNOWN else normalize_memory(rss),
        "start_time": start_time,
    }
