"""SQLModel сущности TrustFeed."""

from .notification import Notification, NotificationKind  # noqa: F401
from .token_analysis import TokenAnalysis  # noqa: F401
from .token_event import TokenEvent, TokenSource  # noqa: F401
from .watchlist import WatchlistEntityType, WatchlistEntry  # noqa: F401

__all__ = [
    "Notification",
    "NotificationKind",
    "TokenAnalysis",
    "TokenEvent",
    "TokenSource",
    "WatchlistEntityType",
    "WatchlistEntry",
]
