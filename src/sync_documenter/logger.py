import json
import logging
import os
import sys

_CONTEXT_FIELDS = ("connector", "facet")


class JsonFormatter(logging.Formatter):
    """Single-line JSON formatter for structured debug output.

    Produces one JSON object per log record with fields: ts, level, logger, msg.
    Connector/facet context set by ``ContextAdapter`` is included when present,
    and exception info is included as an "exc" field.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value:
                entry[name] = value
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ContextAdapter(logging.LoggerAdapter):
    """Tag log lines with the connector and facet being documented.

    The context travels explicitly with each call (see ``DiffContext``)
    instead of living in a process-wide slot, so parallel connector passes
    never see each other's tags.
    """

    def process(self, msg, kwargs):
        extra = {k: v for k, v in (self.extra or {}).items() if v}
        where = "/".join(
            str(extra[name]) for name in _CONTEXT_FIELDS if name in extra
        )
        kwargs["extra"] = {**kwargs.get("extra", {}), **extra}
        if where:
            return f"[{where}] {msg}", kwargs
        return msg, kwargs


def setup_logging(
    debug: bool = False,
    log_file: str | None = None,
    debug_format: str = "text",
    level: str | None = None,
) -> None:
    """
    Configure logging for a documentation run.

    Log records always go to stderr so that report output written to stdout
    by a caller is never interleaved with diagnostics.

    Args:
        debug: If True, overrides the level to DEBUG.
        log_file: Optional log file path written in addition to stderr.
        debug_format: "text" (default) or "json" for structured output.
        level: Level name from configuration; LOG_LEVEL env var wins over it.

    Environment variables:
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Default: INFO.
    """
    env_level = os.getenv("LOG_LEVEL", level or "INFO").upper()

    # debug parameter overrides environment
    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, env_level, logging.INFO)

    handlers: list[logging.Handler] = []
    stderr_handler = logging.StreamHandler(sys.stderr)

    if debug_format == "json":
        stderr_handler.setFormatter(
            JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S")
        )
    else:
        stderr_handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] [%(levelname)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    handlers.append(stderr_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        if debug_format == "json":
            file_handler.setFormatter(
                JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S")
            )
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "[%(asctime)s] [%(levelname)s] %(name)s %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
    )

    # Silence third-party libs unless DEBUG
    if log_level != logging.DEBUG:
        logging.getLogger("asyncio").setLevel(logging.WARNING)
        logging.getLogger("yaml").setLevel(logging.WARNING)
