from abc import ABC, abstractmethod
from collections.abc import Sequence

from core.projection import DisplayRecord


class PresentationSink(ABC):
    """Receives query results and renders them.

    Markup, event wiring and status display all live behind this interface.
    """

    @abstractmethod
    async def present(self, records: Sequence[DisplayRecord], status: str) -> None:
        pass

    @abstractmethod
    async def show_status(self, message: str) -> None:
        pass
