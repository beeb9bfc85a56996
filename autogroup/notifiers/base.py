from __future__ import annotations

from abc import ABC, abstractmethod

from .message import EventMessage


class BaseNotifier(ABC):
    @abstractmethod
    async def send(self, message: EventMessage) -> bool:
        """Deliver one host event. Returns True if successful."""
        raise NotImplementedError
