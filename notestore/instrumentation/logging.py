"""
notestore — Operation Logging
==============================

What:  Logging setup plus one structured summary line per NoteStore operation.
How:   operation_scope() sets the operation id, times the body and logs the
       outcome when the block exits. The level follows the outcome:
       success → INFO, caller-side failures (auth, validation, no session,
       not found) → WARNING, backend and transfer failures → ERROR.
Who:   Used by NoteStore around every public operation.

Log line:
    save ok 12.3ms [a1b2c3d4]
    list_notes failed (backend_error) 30012.0ms [9f8e7d6c]: Permission denied

What is never logged: passwords, id tokens, refresh tokens, note bodies.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from notestore.config import settings
from notestore.exceptions import NoteStoreError
from notestore.instrumentation.operation_id import (
    OperationIdFilter,
    new_operation_id,
    operation_id_var,
)

logger = logging.getLogger("notestore.operations")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [%(operation_id)s]: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for applications embedding notestore.

    What:    Root logger with a stdout handler carrying the operation id.
    When:    Once, at application startup. Library code never calls this.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(OperationIdFilter())

    logging.basicConfig(
        level=getattr(logging, level or settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Per-request chatter from the HTTP stack
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


class OperationScope:
    """Outcome holder for one operation; `fail()` marks it as failed."""

    def __init__(self, name: str):
        self.name = name
        self.operation_id = new_operation_id()
        self.error: Optional[NoteStoreError] = None

    def fail(self, error: NoteStoreError) -> None:
        self.error = error


@contextmanager
def operation_scope(name: str) -> Iterator[OperationScope]:
    """
    Run a block as a named operation.

    Example:
        with operation_scope("save") as scope:
            ...
            scope.fail(BackendError("Permission denied"))
    """
    scope = OperationScope(name)
    token = operation_id_var.set(scope.operation_id)
    start_time = time.perf_counter()
    try:
        yield scope
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        error = scope.error
        if error is None:
            logger.info(
                "%s ok %.1fms [%s]",
                name,
                duration_ms,
                scope.operation_id,
                extra={"operation": name, "duration_ms": round(duration_ms, 2)},
            )
        else:
            logger.log(
                error.level,
                "%s failed (%s) %.1fms [%s]: %s",
                name,
                error.code,
                duration_ms,
                scope.operation_id,
                error.message,
                extra={
                    "operation": name,
                    "error_code": error.code,
                    "duration_ms": round(duration_ms, 2),
                },
            )
        operation_id_var.reset(token)
