"""Profile-related schemas."""

from pydantic import BaseModel, Field, field_validator

# Data URLs for avatars up to 5 MB of image data.
MAX_AVATAR_REF_LENGTH = 7_000_000


class ProfileUpdate(BaseModel):
    """Request body for editing profile metadata.

    Omitted fields are left unchanged; an explicit ``avatar_ref: null``
    removes the avatar.
    """

    display_name: str | None = Field(default=None, min_length=1, max_length=60)
    avatar_ref: str | None = Field(default=None, max_length=MAX_AVATAR_REF_LENGTH)

    @field_validator("display_name", "avatar_ref")
    @classmethod
    def storable_text(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                value.encode("utf-8")
            except UnicodeEncodeError:
                raise ValueError("contains invalid characters") from None
        return value
