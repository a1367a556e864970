# Domain Package
from .errors import SessionStateError, ShobdoError, StoreError
from .models import DailyProgress, DueWord, ReviewResult, ReviewState, SessionStats, Word
from .ports import ReviewStore

__all__ = [
    "DailyProgress",
    "DueWord",
    "ReviewResult",
    "ReviewState",
    "ReviewStore",
    "SessionStats",
    "SessionStateError",
    "ShobdoError",
    "StoreError",
    "Word",
]
