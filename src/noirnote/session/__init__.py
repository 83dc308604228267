"""Play sessions and their background persistence."""

from noirnote.session.controller import SessionController, is_solution
from noirnote.session.state import Outcome, Session
from noirnote.session.tasks import BackgroundTasks

__all__ = [
    "BackgroundTasks",
    "Outcome",
    "Session",
    "SessionController",
    "is_solution",
]
