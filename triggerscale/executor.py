import asyncio
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class ScalingExecutor(Protocol):
    """Applies a decided replica count to a workload."""

    async def set_replicas(self, identity: str, replicas: int) -> None:
        """Sets the workload's replica count, raising on failure."""
        ...


class InMemoryExecutor:
    """Keeps replica counts in memory. Useful for dry runs and simulations."""

    def __init__(self, initial: Optional[Dict[str, int]] = None):
        self.replicas: Dict[str, int] = dict(initial or {})
        self.history: List[Tuple[str, int]] = []

    async def set_replicas(self, identity: str, replicas: int) -> None:
        self.replicas[identity] = replicas
        self.history.append((identity, replicas))

    def get_replicas(self, identity: str, default: Optional[int] = None) -> Optional[int]:
        return self.replicas.get(identity, default)

    def history_for(self, identity: str) -> List[int]:
        return [replicas for name, replicas in self.history if name == identity]


class CallbackExecutor:
    """Forwards replica changes to a user supplied callable, sync or async."""

    def __init__(self, func: Callable[[str, int], Any]):
        self.func = func

    async def set_replicas(self, identity: str, replicas: int) -> None:
        result = self.func(identity, replicas)
        if asyncio.iscoroutine(result):
            await result
