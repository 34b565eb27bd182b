from abc import ABC, abstractmethod
from typing import Optional

from core.models import ViewModel


class Renderer(ABC):
    name: str

    @abstractmethod
    async def render(self, view: ViewModel, view_mode: str) -> None:
        ...

    @abstractmethod
    async def render_empty(self, view: Optional[ViewModel]) -> None:
        ...

    @abstractmethod
    async def notify(self, message: str, level: str = "info") -> None:
        ...
