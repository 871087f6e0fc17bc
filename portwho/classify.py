from typing import Callable, List, NamedTuple, Tuple

from .models import UNKNOWN

Predicate = Callable[[str, str], bool]


class Rule(NamedTuple):
    tag: str
    matches: Predicate  # (name, cmd), both lower-cased


def _cmd_has(*words: str) -> Predicate:
    return lambda name, cmd: any(w in cmd for w in words)


def _name_has(*words: str) -> Predicate:
    return lambda name, cmd: any(w in name for w in words)


def _either_has(*words: str) -> Predicate:
    return lambda name, cmd: any(w in name or w in cmd for w in words)


def _is_node(name: str, cmd: str) -> bool:
    return name == "node" or any(w in cmd for w in ("node", "npm", "npx"))


def _is_go(name: str, cmd: str) -> bool:
    # "google-chrome" would otherwise read as go
    return "go" in cmd and "google" not in cmd and "google" not in name


# first match wins
TECHNOLOGY_RULES: List[Rule] = [
    Rule("node", _is_node),
    Rule("python", _cmd_has("python", "streamlit", "fastapi", "flask", "django", "uvicorn", "gunicorn")),
    Rule("postgres", _either_has("postgres")),
    Rule("mysql", _either_has("mysqld", "mariadb")),
    Rule("mongodb", _either_has("mongod")),
    Rule("redis", _either_has("redis")),
    Rule("memcached", _either_has("memcached")),
    Rule("java", _either_has("java")),
    Rule("go", _is_go),
    Rule("browser", _name_has("firefox", "chrome", "safari")),
]

RUNTIME_TECHNOLOGIES = {"node", "python", "go", "java"}
DATABASE_TECHNOLOGIES = {"postgres", "mysql", "mongodb"}
CACHE_TECHNOLOGIES = {"redis", "memcached"}
WEB_KEYWORDS = ("server", "start", "run", "dev")


def detect_technology(name: str, command_line: str) -> str:
    name, cmd = name.lower(), command_line.lower()
    for rule in TECHNOLOGY_RULES:
        if rule.matches(name, cmd):
            return rule.tag
    return UNKNOWN


def service_type_for(technology: str, command_line: str) -> str:
    if technology in RUNTIME_TECHNOLOGIES:
        cmd = command_line.lower()
        return "web" if any(k in cmd for k in WEB_KEYWORDS) else "cli"
    if technology in DATABASE_TECHNOLOGIES:
        return "database"
    if technology in CACHE_TECHNOLOGIES:
        return "cache"
    if technology == "browser":
        return "browser"
    return "system"


def classify(name: str, command_line: str) -> Tuple[str, str]:
    """Best-effort ``(technology, service_type)`` guess from name and command line."""
    technology = detect_technology(name, command_line)
    return technology, service_type_for(technology, command_line)
