"""Signage Database Models."""

from signage.models.user import User
from signage.models.advertisement import Advertisement
from signage.models.display import Display
from signage.models.connection_request import ConnectionRequest
from signage.models.loop import Loop, LoopItem

__all__ = [
    "User",
    "Advertisement",
    "Display",
    "ConnectionRequest",
    "Loop",
    "LoopItem",
]
