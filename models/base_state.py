"""Base class for the in-memory state containers of a compose session."""

from abc import abstractmethod
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Return the current wall-clock time in UTC."""
    return datetime.now(timezone.utc)


class StateContainer(BaseModel):
    """Base class for mutable in-memory registries (drafts, messages).

    Each subclass owns one collection of entities and is the only component
    allowed to mutate it. Other components read through copies returned by
    the container and write through its operations.

    Args:
        container_type: Identifies which container this is.
        last_updated: Wall-clock time this container was last modified.
        update_count: Number of times this container has been modified.
    """

    container_type: str = Field(description="Identifies which container this is")
    last_updated: datetime = Field(
        default_factory=utc_now,
        description="Wall-clock time this container was last modified",
    )
    update_count: int = Field(
        default=0, description="Number of times this container has been modified"
    )

    def touch(self) -> None:
        """Record that the container was modified."""
        self.last_updated = utc_now()
        self.update_count += 1

    @abstractmethod
    def get_snapshot(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot of the container for API responses.

        Returns:
            Dictionary representation of current contents.
        """
        pass

    @abstractmethod
    def validate_state(self) -> list[str]:
        """Validate internal consistency and return any issues.

        Returns:
            List of validation error messages (empty list if valid).
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Reset this container to its empty default.

        After clear(), validate_state() must return no errors and
        update_count must be 0.
        """
        pass

    @property
    def summary(self) -> str:
        """Return a brief human-readable summary of the container."""
        return f"{self.container_type} (override summary property for details)"
