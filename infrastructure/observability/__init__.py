"""
Observability: structured logging and context management.

Provides:
- Contextual logging with run tag / node id
- Log rotation and file management
- Third-party library log level control
- Guarded Opik span annotation
"""

from infrastructure.observability.logging import (
    clear_node_context,
    configure_logging,
    get_log_context,
    make_run_tag,
    set_log_context,
)
from infrastructure.observability.tracing import annotate_current_span

__all__ = [
    "annotate_current_span",
    "configure_logging",
    "set_log_context",
    "get_log_context",
    "clear_node_context",
    "make_run_tag",
]
