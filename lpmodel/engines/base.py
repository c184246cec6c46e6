"""
Abstract base class for solving engines.

An engine consumes the request of one EngineKind and returns the matching
response, synchronously or as an awaitable. Model.solve() chooses the bridge
from the engine's kind attribute, so an engine never has to be probed.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from ..bridges.base import EngineKind
from ..errors import UnknownEngineKind


class SolverEngine(ABC):
    """
    Abstract base class for solving engines.

    Each engine provides:
    - The EngineKind of the schema it speaks
    - Availability check (is the library installed?)
    - solve(request, options) returning a response or an awaitable
    """

    @property
    @abstractmethod
    def kind(self) -> str:
        """EngineKind of the request/response schema."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine identifier (e.g., 'scipy-glpk')."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if this engine's dependencies are installed.

        Returns:
            True if the engine can be used, False otherwise.
        """
        pass

    def get_info(self) -> Dict[str, Any]:
        """Engine description."""
        return {"name": self.name, "kind": self.kind}

    @abstractmethod
    def solve(self, request: Any, options: Optional[Dict[str, Any]] = None) -> Any:
        """
        Solve one request.

        Args:
            request: Request in the schema of self.kind
            options: Engine option bag

        Returns:
            Response in the schema of self.kind, or an awaitable of it
        """
        pass


ResponseLike = Union[Any, Awaitable[Any]]


class FunctionEngine(SolverEngine):
    """
    Engine wrapping any callable (request, options) -> response.

    The callable may be a coroutine function; Model.solve() awaits it.

    Example:
        >>> async def remote(request, options):
        ...     return await client.post("/glpk", json=request)
        >>> await model.solve(FunctionEngine("glpk", remote))
    """

    def __init__(
        self,
        kind: str,
        func: Callable[[Any, Optional[Dict[str, Any]]], ResponseLike],
        name: Optional[str] = None,
    ):
        if not EngineKind.is_valid(kind):
            raise UnknownEngineKind(kind, EngineKind.all_types())
        self._kind = kind
        self._func = func
        self._name = name or getattr(func, "__name__", "function")

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return True

    def solve(self, request: Any, options: Optional[Dict[str, Any]] = None) -> ResponseLike:
        return self._func(request, options)
