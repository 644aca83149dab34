from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IClinicDirectory(ABC):
    """Port for the remote clinic directory service."""

    @abstractmethod
    async def list_clinics(self) -> Any:
        """Return the decoded response body (normally a list of records)."""
