"""Abstract definition of the analysis engine boundary."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EngineRequest:
    """Everything sent to the engine for one attempt."""

    prompt: str
    system_instruction: str
    json_output: bool = True
    use_search: bool = True


class EngineTransport(ABC):
    """
    Interface for an LLM service that answers an EngineRequest with text.

    Implementations raise CapabilityUnavailable when the engine rejects the
    search capability, and EngineUnavailable for any other transport failure.
    """

    name: str = "generic"

    @abstractmethod
    async def complete(self, request: EngineRequest) -> str:
        """Return the raw response text for ``request``."""

    async def close(self) -> None:
        """Release network resources."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
