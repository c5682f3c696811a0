"""Validated markup documents."""

from dataclasses import dataclass, field

from ..cluster.geometry import Coordinate, extract_coordinates


@dataclass(frozen=True)
class MarkupDocument:
    """A KML document that has passed validation."""
    text: str
    coordinates: tuple[Coordinate, ...] = field(default=(), compare=False)

    @classmethod
    def from_validated(cls, text: str) -> "MarkupDocument":
        return cls(text=text, coordinates=tuple(extract_coordinates(text)))

    def __str__(self) -> str:
        return self.text
