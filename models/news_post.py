from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wp_importer.parsers.content import slugify

PostStatus = Literal["DRAFT", "PUBLISHED", "SCHEDULED", "TRASH"]


class NewsPost(BaseModel):
    """A post as stored in the portal's ``posts`` table."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
    )

    title: str = Field(..., min_length=1)
    slug: Optional[str] = Field(default=None, validate_default=True)
    content: str = ""
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    author_id: str
    status: PostStatus = "DRAFT"
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category_ids: list[str] = Field(default_factory=list)
    tag_ids: list[str] = Field(default_factory=list)

    @field_validator("slug", mode="before")
    @classmethod
    def _ensure_slug(cls, v: Optional[str], info):  # type: ignore[override]
        if v is not None and v.strip():
            return v.strip()[:200]
        title = info.data.get("title")
        if isinstance(title, str) and title.strip():
            return slugify(title)[:200]
        return v

    @field_validator("category_ids", "tag_ids", mode="before")
    @classmethod
    def _dedup_ids(cls, v: Optional[list[str]]):
        if not v:
            return []
        seen = set()
        deduped = []
        for item in v:
            if item not in seen:
                seen.add(item)
                deduped.append(item)
        return deduped

    def to_row(self) -> dict[str, Any]:
        """Column values for an ``INSERT`` into ``posts`` (relations excluded)."""
        created = self.created_at or self.published_at or datetime.now()
        return {
            "title": self.title,
            "slug": self.slug,
            "content": self.content,
            "excerpt": self.excerpt,
            "featured_image": self.featured_image,
            "author_id": self.author_id,
            "status": self.status,
            "published_at": self.published_at,
            "created_at": created,
            "updated_at": self.updated_at or created,
        }
