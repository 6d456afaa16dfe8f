"""Stop data models: author-owned templates and user-owned stops."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Self

# (longitude, latitude)
Coordinates = tuple[float, float]


def coordinates_from(raw: Any) -> Coordinates:
    """Parse a `[lon, lat]` pair from serialized data."""
    lon, lat = raw
    return (float(lon), float(lat))


@dataclass(frozen=True, slots=True)
class Author:
    """Journey or stop author, kept for attribution."""

    name: str
    avatar: str = ""
    bio: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "avatar": self.avatar}
        if self.bio is not None:
            data["bio"] = self.bio
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            name=data["name"],
            avatar=data.get("avatar", ""),
            bio=data.get("bio"),
        )


def _author_from(data: dict[str, Any] | None) -> Author | None:
    return Author.from_dict(data) if data else None


@dataclass(frozen=True, slots=True)
class StopTemplate:
    """Immutable stop definition owned by a journey author."""

    id: str
    name: str
    coordinates: Coordinates
    image_url: str = ""
    images: tuple[str, ...] | None = None
    description: str = ""
    gallery: tuple[str, ...] = ()
    activities: tuple[str, ...] = ()
    author: Author | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "coordinates": list(self.coordinates),
            "image_url": self.image_url,
            "images": list(self.images) if self.images is not None else None,
            "description": self.description,
            "gallery": list(self.gallery),
            "activities": list(self.activities),
            "author": self.author.to_dict() if self.author else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create from dictionary."""
        images = data.get("images")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            coordinates=coordinates_from(data["coordinates"]),
            image_url=data.get("image_url", ""),
            images=tuple(images) if images is not None else None,
            description=data.get("description") or "",
            gallery=tuple(data.get("gallery") or ()),
            activities=tuple(data.get("activities") or ()),
            author=_author_from(data.get("author")),
        )


@dataclass(slots=True)
class UserStop:
    """A stop inside a user's fork.

    Carries a by-value copy of every template field plus the user's own
    visited flag and note. Nothing here references the template it came from.
    """

    id: str
    name: str
    coordinates: Coordinates
    image_url: str = ""
    images: list[str] | None = None
    description: str = ""
    gallery: list[str] = field(default_factory=list)
    activities: list[str] = field(default_factory=list)
    author: Author | None = None
    note: str | None = None
    visited: bool = False

    @classmethod
    def from_template(cls, template: StopTemplate) -> Self:
        """Copy a template into a fresh, unvisited user stop."""
        return cls(
            id=template.id,
            name=template.name,
            coordinates=template.coordinates,
            image_url=template.image_url,
            images=list(template.images) if template.images is not None else None,
            description=template.description,
            gallery=list(template.gallery),
            activities=list(template.activities),
            author=template.author,
            note=None,
            visited=False,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "coordinates": list(self.coordinates),
            "image_url": self.image_url,
            "images": list(self.images) if self.images is not None else None,
            "description": self.description,
            "gallery": list(self.gallery),
            "activities": list(self.activities),
            "author": self.author.to_dict() if self.author else None,
            "note": self.note,
            "visited": self.visited,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create from dictionary."""
        images = data.get("images")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            coordinates=coordinates_from(data["coordinates"]),
            image_url=data.get("image_url", ""),
            images=list(images) if images is not None else None,
            description=data.get("description") or "",
            gallery=list(data.get("gallery") or []),
            activities=list(data.get("activities") or []),
            author=_author_from(data.get("author")),
            note=data.get("note"),
            visited=bool(data.get("visited", False)),
        )


@dataclass(slots=True)
class Moment:
    """A photo or memory captured along a journey."""

    id: str
    coordinates: Coordinates
    image_url: str = ""
    caption: str = ""
    author: Author | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "coordinates": list(self.coordinates),
            "image_url": self.image_url,
            "caption": self.caption,
            "author": self.author.to_dict() if self.author else None,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=str(data["id"]),
            coordinates=coordinates_from(data["coordinates"]),
            image_url=data.get("image_url", ""),
            caption=data.get("caption", ""),
            author=_author_from(data.get("author")),
            created_at=(
                datetime.fromisoformat(data["created_at"])
                if data.get("created_at")
                else datetime.now(UTC)
            ),
        )

    def copy(self) -> Moment:
        """Return an independent copy of this moment."""
        return Moment(
            id=self.id,
            coordinates=self.coordinates,
            image_url=self.image_url,
            caption=self.caption,
            author=self.author,
            created_at=self.created_at,
        )
