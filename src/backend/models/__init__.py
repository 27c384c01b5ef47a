"""Database models module."""

from models.photo import Photo, PhotoCategory, PhotoStatus, PhotoTestType
from models.photo_skip import PhotoSkip
from models.user import Gender, User
from models.vote import Vote

__all__ = [
    "User",
    "Gender",
    "Photo",
    "PhotoCategory",
    "PhotoStatus",
    "PhotoTestType",
    "PhotoSkip",
    "Vote",
]
