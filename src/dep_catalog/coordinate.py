import re
from dataclasses import dataclass

from .error_handling import CoordinateFormatError

_COMPONENT = re.compile(r"^[^\s:]+$")


def is_valid_component(value: object) -> bool:
    """True for non-empty text without whitespace or ':'."""
    return isinstance(value, str) and bool(_COMPONENT.match(value))


@dataclass(frozen=True)
class Coordinate:
    """A single Maven-style coordinate for a library dependency."""

    group: str
    artifact: str
    version: str

    def __post_init__(self):
        for part in ("group", "artifact", "version"):
            if not is_valid_component(getattr(self, part)):
                raise CoordinateFormatError(
                    f"Invalid coordinate {part}: {getattr(self, part)!r}"
                )

    @property
    def module(self) -> str:
        """The versionless group:artifact pair."""
        return f"{self.group}:{self.artifact}"

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"


def parse_coordinate(text: str) -> Coordinate:
    """
    Parse a group:artifact:version string.

    Raises:
        CoordinateFormatError: If the text is not exactly three non-empty,
            whitespace-free components
    """
    if not isinstance(text, str):
        raise CoordinateFormatError(f"Coordinate must be a string, got {type(text).__name__}")

    parts = text.split(":")
    if len(parts) != 3:
        raise CoordinateFormatError(
            f"Invalid coordinate '{text}' (expected group:artifact:version)"
        )
    return Coordinate(*parts)
