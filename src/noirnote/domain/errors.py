"""Exception types shared across the engine."""

from __future__ import annotations


class NoirNoteError(RuntimeError):
    pass


class AuthenticationRequired(NoirNoteError):
    """An operation that needs a player identity ran without one."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} requires a signed-in player")
        self.operation = operation


class UnknownCase(NoirNoteError):
    def __init__(self, case_id: str) -> None:
        super().__init__(f"unknown case: {case_id}")
        self.case_id = case_id


class StoreUnavailable(NoirNoteError):
    """The document store could not be reached; the caller may retry later."""
