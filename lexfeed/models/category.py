"""Legal category taxonomy models."""

from pydantic import Field

from .base import DBModel


class LegalCategory(DBModel):
    """Fixed taxonomy entry."""

    name: str = Field(..., description="Display name, matched exactly against classifier labels")
    slug: str = Field(..., description="URL-safe identifier")
