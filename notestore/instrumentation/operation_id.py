"""
notestore — Operation IDs
==========================

What:  Assigns a short unique id to each NoteStore operation.
How:   The id lives in a ContextVar, so concurrent operations on one event loop
       each see their own value; OperationIdFilter copies it onto log records.
Who:   Set by operation_scope(); read by the logging format "%(operation_id)s".
"""

import logging
import uuid
from contextvars import ContextVar

# Coroutine-local id of the operation currently running ("" outside operations)
operation_id_var: ContextVar[str] = ContextVar("operation_id", default="")


def new_operation_id() -> str:
    """8 hex chars are plenty to correlate the lines of one operation."""
    return uuid.uuid4().hex[:8]


class OperationIdFilter(logging.Filter):
    """Adds `operation_id` to every record passing through the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "operation_id"):
            record.operation_id = operation_id_var.get() or "-"
        return True
