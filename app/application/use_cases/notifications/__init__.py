"""Public helpers for emitting and managing user notifications."""

from .fan_out import ChannelSender, NotificationFanOut
from .preferences import PreferenceFilter, get_preferences, update_preferences
from .recipients import RecipientResolutionError, RecipientResolver
from .service import DEFAULT_PAGE_SIZE, NotificationService
from .templates import TEMPLATES, is_recognized, map_event

__all__ = [
    "ChannelSender",
    "NotificationFanOut",
    "PreferenceFilter",
    "get_preferences",
    "update_preferences",
    "RecipientResolutionError",
    "RecipientResolver",
    "DEFAULT_PAGE_SIZE",
    "NotificationService",
    "TEMPLATES",
    "is_recognized",
    "map_event",
]
