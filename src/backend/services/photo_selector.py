"""
Photo Assignment Selector.

Chooses the next photo a rater should see. Coverage is spread fairly by
serving the least-voted eligible photo first (oldest first on ties).

Assignment takes no lock: two raters fetching at the same time may be
handed the same photo. Uniqueness is only enforced per (photo, rater) at
vote submission.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from core.dates import age_on, utc_now
from models.photo import Photo
from repositories.photo_repository import PhotoRepository
from repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PhotoDescriptor:
    """Minimal view of a photo handed to a rater."""

    id: str
    image_url: str
    category: str

    @classmethod
    def from_model(cls, photo: Photo) -> "PhotoDescriptor":
        return cls(id=photo.id, image_url=photo.image_url, category=photo.category)


@dataclass(frozen=True)
class NextPhotoResult:
    """Selector outcome; `photo is None` means nothing is left to rate."""

    photo: Optional[PhotoDescriptor]

    @property
    def no_more_photos(self) -> bool:
        return self.photo is None


class PhotoSelector:
    """Service picking the next eligible photo for a rater."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.photo_repo = PhotoRepository(db)
        self.user_repo = UserRepository(db)

    async def get_next_photo(self, rater_id: str) -> NextPhotoResult:
        """
        Return the next photo for the rater, or an empty result.

        A rater without a profile record is treated as having no gender and
        no known age, so only untargeted photos match.
        """
        now = utc_now()
        rater = await self.user_repo.get_by_id(rater_id)
        gender = rater.gender if rater else None
        age = age_on(rater.birth_date, now.date()) if rater else None

        photos = await self.photo_repo.find_next_eligible(
            rater_id=rater_id,
            rater_gender=gender,
            rater_age=age,
            now=now,
            limit=1,
        )

        if not photos:
            logger.info("no_photos_available", rater_id=rater_id)
            return NextPhotoResult(photo=None)

        photo = photos[0]
        logger.debug("photo_assigned", rater_id=rater_id, photo_id=photo.id, vote_count=photo.vote_count)
        return NextPhotoResult(photo=PhotoDescriptor.from_model(photo))
