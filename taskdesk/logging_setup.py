import logging
import sys


class _ThirdPartyNoiseFilter(logging.Filter):
    """Keep taskdesk and uvicorn logs; let other libraries through only at WARNING+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(("taskdesk", "uvicorn")):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: str = "INFO") -> None:
    """Install a single stderr handler on the root logger. Call once at startup."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handler.addFilter(_ThirdPartyNoiseFilter())
    root.addHandler(handler)
