from .feed import Feed
from .relations import FeedFollow
from .user import User

__all__ = ["Feed", "FeedFollow", "User"]
