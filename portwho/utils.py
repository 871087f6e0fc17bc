import logging
import sys


class C:
    RESET = '\033[0m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    CYAN = '\033[36m'
    GRAY = '\033[90m'


def setup_logging(level: str = "WARNING") -> logging.Logger:
    logger = logging.getLogger("portwho")
    logger.setLevel(getattr(logging, str(level).upper(), logging.WARNING))

    # Prevent duplicate handlers on repeated calls
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    return logger
