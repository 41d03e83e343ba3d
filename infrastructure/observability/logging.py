"""
Logging setup for workbench runs.

Every line carries the run tag and the level-2 node id being augmented. Both live
in contextvars, and each asyncio task runs in its own context copy, so concurrent
augmentations log under their own node id.
"""

import contextvars
import hashlib
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

cv_run_tag = contextvars.ContextVar("run_tag", default="-")
cv_node_id = contextvars.ContextVar("node_id", default="-")

# trace metadata only, not printed
cv_provider = contextvars.ContextVar("provider", default="-")
cv_model = contextvars.ContextVar("model", default="-")
cv_run_id_full = contextvars.ContextVar("run_id_full", default="-")


def make_run_tag(run_id_full: str, length: int = 8) -> str:
    """Short stable tag for a run id."""
    h = hashlib.blake2s(run_id_full.encode("utf-8"), digest_size=8).hexdigest()
    return h[:length]


class ContextInjectFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.run = cv_run_tag.get() or "-"
        record.node = cv_node_id.get() or "-"
        return True


def set_log_context(
    *,
    run_id_full: str | None = None,
    node_id: str | None = None,
    provider: str | None = None,
    model: str | None = None,
) -> None:
    if run_id_full is not None:
        cv_run_id_full.set(str(run_id_full))
        cv_run_tag.set(make_run_tag(str(run_id_full)))
    if node_id is not None:
        cv_node_id.set(str(node_id))
    if provider is not None:
        cv_provider.set(str(provider))
    if model is not None:
        cv_model.set(str(model))


def get_log_context() -> dict[str, str]:
    """Current run and node context, attached to generation traces."""
    return {
        "run_tag": str(cv_run_tag.get() or "-"),
        "run_id_full": str(cv_run_id_full.get() or "-"),
        "node_id": str(cv_node_id.get() or "-"),
        "provider": str(cv_provider.get() or "-"),
        "model": str(cv_model.get() or "-"),
    }


def clear_node_context() -> None:
    cv_node_id.set("-")


def configure_logging(
    *,
    log_file: Path | None = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 10_000_000,
    backup_count: int = 5,
) -> None:
    """
    Install console and optional rotating file handlers on the root logger.

    Calling it again replaces the handlers installed by a previous call.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    console_fmt = "%(asctime)s [%(levelname)s] r=%(run)s n=%(node)s | %(message)s"
    file_fmt = "%(asctime)s [%(levelname)s] %(name)s | r=%(run)s n=%(node)s | %(message)s"

    ctx_filter = ContextInjectFilter()

    ch = logging.StreamHandler()
    ch.setLevel(console_level)
    ch.setFormatter(logging.Formatter(console_fmt, datefmt="%H:%M:%S"))
    ch.addFilter(ctx_filter)
    root.addHandler(ch)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(file_fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        fh.addFilter(ctx_filter)
        root.addHandler(fh)

    for name in ("httpx", "httpcore", "urllib3", "openai", "anthropic"):
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("opik").setLevel(logging.INFO)

    logging.getLogger(__name__).info(
        "Logging configured (console_level=%s, file=%s)",
        logging.getLevelName(console_level),
        str(log_file) if log_file is not None else "None",
    )
