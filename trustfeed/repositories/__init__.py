"""Репозитории для работы с БД."""

from .analysis_repo import get_cached_analyses
from .notification_repo import (
    count_unread,
    create_notification,
    find_recent_notification,
    list_notifications,
    mark_notifications_read,
)
from .token_event_repo import (
    get_token_event,
    insert_token_event_if_absent,
    list_unanalyzed_events,
    mark_event_analyzed,
)
from .watchlist_repo import list_watched_mints

__all__ = [
    "count_unread",
    "create_notification",
    "find_recent_notification",
    "get_cached_analyses",
    "get_token_event",
    "insert_token_event_if_absent",
    "list_notifications",
    "list_unanalyzed_events",
    "list_watched_mints",
    "mark_event_analyzed",
    "mark_notifications_read",
]
