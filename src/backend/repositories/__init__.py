"""Repository modules for database access."""

from repositories.photo_repository import PhotoRepository
from repositories.skip_repository import SkipRepository
from repositories.user_repository import UserRepository
from repositories.vote_repository import VoteRepository

__all__ = [
    "PhotoRepository",
    "SkipRepository",
    "UserRepository",
    "VoteRepository",
]
