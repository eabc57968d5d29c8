from .badge import Badge
from .user_badge import UserBadge
from .badge_progress import BadgeProgress
from .travel_entry import TravelEntry, EntryTag
from .journey import Journey, JourneyExperience
from .dream import Dream
from .media_file import MediaFile

__all__ = [
    "Badge",
    "UserBadge",
    "BadgeProgress",
    "TravelEntry",
    "EntryTag",
    "Journey",
    "JourneyExperience",
    "Dream",
    "MediaFile",
]
