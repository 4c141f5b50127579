from abc import ABC, abstractmethod
from typing import Any


class GraphAdapter(ABC):
    @abstractmethod
    def export(self, graph, **kwargs) -> Any:
        pass
