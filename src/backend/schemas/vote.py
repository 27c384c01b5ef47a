"""
Vote-related Pydantic schemas.

Ratings are validated strictly (integers 0-3, no floats, strings or bools)
so malformed votes are rejected before anything is written.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, StrictInt, field_validator

# Feedback vocabularies shown to raters by the app
FEELING_TAGS = (
    # Positive
    "Ótima foto!",
    "Sorriso lindo!",
    "Visual bacana!",
    "Simpático(a)",
    "Vibe boa",
    "Daria match!",
    "Parece confiável",
    "Interessante",
    # Negative/Neutral
    "Arrogante",
    "Sorriso forçado",
    "Sem graça",
    "Parece falso(a)",
    "Desconfortável",
    "Cansado(a)",
    "Tímido(a)",
    "Cara de golpe",
    "Intenso demais",
    "Foto parece antiga",
)

SUGGESTION_TAGS = (
    "Ângulo ruim",
    "Foto escura",
    "Foto clara demais",
    "Foto borrada",
    "Não vejo o rosto",
    "Muita gente na foto",
    "Óculos escuros",
    "Sorria mais",
    "Sorria menos",
    "Filtro demais",
    "Fundo distrai",
    "Fundo bagunçado",
    "Muito perto",
    "Muito longe",
    "Foto de espelho",
    "Olhar desviado",
)

NOTE_MAX_LENGTH = 200


class VoteFeedbackIn(BaseModel):
    """Optional qualitative feedback."""

    feeling_tags: list[str] = Field(default_factory=list)
    suggestion_tags: list[str] = Field(default_factory=list)
    note: Optional[str] = Field(None, max_length=NOTE_MAX_LENGTH)

    @field_validator("feeling_tags")
    @classmethod
    def validate_feeling_tags(cls, v: list[str]) -> list[str]:
        unknown = [tag for tag in v if tag not in FEELING_TAGS]
        if unknown:
            raise ValueError(f"Unknown feeling tags: {unknown}")
        return list(dict.fromkeys(v))

    @field_validator("suggestion_tags")
    @classmethod
    def validate_suggestion_tags(cls, v: list[str]) -> list[str]:
        unknown = [tag for tag in v if tag not in SUGGESTION_TAGS]
        if unknown:
            raise ValueError(f"Unknown suggestion tags: {unknown}")
        return list(dict.fromkeys(v))


class VoteMetadataIn(BaseModel):
    """Optional client-reported metadata."""

    voting_duration_ms: Optional[StrictInt] = Field(None, ge=0)
    device_type: Optional[Literal["mobile", "desktop"]] = None


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    photo_id: str = Field(..., min_length=1, max_length=64)
    attraction: StrictInt = Field(..., ge=0, le=3)
    trust: StrictInt = Field(..., ge=0, le=3)
    intelligence: StrictInt = Field(..., ge=0, le=3)
    feedback: Optional[VoteFeedbackIn] = None
    metadata: Optional[VoteMetadataIn] = None


class VoteResponse(BaseModel):
    """Response after successfully casting a vote."""

    vote_id: str
    karma_earned: int
    show_warning: bool = Field(False, description="Low-effort voting detected; show the one-time warning")
    penalized: bool = Field(False, description="This vote earned no karma because the pattern persisted")


class SkipRequest(BaseModel):
    """Schema for skipping a photo."""

    photo_id: str = Field(..., min_length=1, max_length=64)


class SkipResponse(BaseModel):
    """Skips always report success."""

    success: bool = True


class PhotoOut(BaseModel):
    """Minimal photo descriptor handed to a rater."""

    id: str
    image_url: str
    category: str

    model_config = {"from_attributes": True}


class NextPhotoResponse(BaseModel):
    """Next photo to rate, or an explicit end-of-queue signal."""

    photo: Optional[PhotoOut] = None
    no_more_photos: bool
    # Session state, so a reconnecting client can re-show an unacknowledged warning
    pending_warning: bool = False
    penalized: bool = False


class WarningAckResponse(BaseModel):
    """Result of acknowledging the low-effort warning."""

    acknowledged: bool = True


class SessionEndResponse(BaseModel):
    """Result of ending a voting session."""

    ended: bool
