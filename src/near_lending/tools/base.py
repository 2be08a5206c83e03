from abc import ABC, abstractmethod
from typing import Any, Dict


class BaseTool(ABC):
    """Dispatches named operations and returns JSON-ready responses"""
    name: str = ""
    description: str = ""
    version: str = "0.1.0"
    operations: tuple = ()

    def can_handle(self, input_data: Any) -> bool:
        return isinstance(input_data, dict) and input_data.get("operation") in self.operations

    async def run(self, input_data: Any) -> Dict[str, Any]:
        return await self.execute(input_data)

    @abstractmethod
    async def execute(self, parameters: Dict[str, Any]) -> Dict[str, Any]:
        ...
