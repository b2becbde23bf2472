"""Key-value settings storage interface."""

from typing import Protocol


class SettingsStore(Protocol):
    """Interface for the external facility that holds the serialized document."""

    def load(self) -> dict | None:
        """Return the stored document, or None if nothing has been saved."""
        ...

    def save(self, data: dict) -> None:
        """Replace the stored document."""
        ...
