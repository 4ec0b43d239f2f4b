# Instrumentation package init
"""
notestore — Instrumentation Package
====================================

What:  Cross-cutting concerns applied to every NoteStore operation.

Per operation:
    [Operation ID] → [Operation log line]

    1. Operation ID: short correlation id stored in a ContextVar and stamped
       onto every log record emitted while the operation runs
    2. Operation log: one summary line with outcome, error code and duration
"""
