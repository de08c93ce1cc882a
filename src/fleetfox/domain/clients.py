"""Domain models for selectable clients."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ClientOption:
    """An active client a submission can be filed under."""

    id: str
    label: str
