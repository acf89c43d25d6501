# Application Package
from .scheduler import Scheduler
from .session_queue import PendingMiss, SessionQueue, SessionState
from .study import StudySession

__all__ = ["Scheduler", "SessionQueue", "SessionState", "PendingMiss", "StudySession"]
