"""Domain models for photo slots and uploaded images."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class PhotoSlot(StrEnum):
    """One of the fixed photo categories required for a submission."""

    EXTERIOR_FRONT = "exterior_front"
    EXTERIOR_BACK = "exterior_back"
    EXTERIOR_LEFT = "exterior_left"
    EXTERIOR_RIGHT = "exterior_right"
    INTERIOR_DASHBOARD = "interior_dashboard"
    INTERIOR_SEATS = "interior_seats"
    INTERIOR_FLOOR = "interior_floor"

    @property
    def label(self) -> str:
        """Short label shown on an empty upload box."""
        return _SLOT_LABELS[self]

    @property
    def display_name(self) -> str:
        """Title Case rendering of the identifier."""
        return format_identifier(self.value)


REQUIRED_SLOTS: tuple[PhotoSlot, ...] = tuple(PhotoSlot)

_SLOT_LABELS = {
    PhotoSlot.EXTERIOR_FRONT: "Front View",
    PhotoSlot.EXTERIOR_BACK: "Back View",
    PhotoSlot.EXTERIOR_LEFT: "Left Side",
    PhotoSlot.EXTERIOR_RIGHT: "Right Side",
    PhotoSlot.INTERIOR_DASHBOARD: "Dashboard",
    PhotoSlot.INTERIOR_SEATS: "Seats",
    PhotoSlot.INTERIOR_FLOOR: "Floor Mats",
}


def format_identifier(value: str) -> str:
    """Convert a snake_case identifier to Title Case words."""
    return " ".join(word.capitalize() for word in value.replace("_", " ").split())


def parse_slot(value: str) -> PhotoSlot | None:
    """Return the slot for a raw identifier, accepting kebab-case input ids."""
    try:
        return PhotoSlot(value.strip().replace("-", "_"))
    except ValueError:
        return None


class UploadedImageRecord(BaseModel):
    """Metadata for one filled slot."""

    image_id: str
    image_url: str
    image_type: PhotoSlot
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    fox_id: str | None = None

    @property
    def is_inline(self) -> bool:
        """Whether the image is embedded as a data URL."""
        return self.image_url.startswith("data:")
