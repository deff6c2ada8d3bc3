"""
Search results and availability aggregation.

Not finding a tool, or finding a tool that is not the expected toolchain,
are normal outcomes during selection. They are represented as results that
can explain themselves rather than as exceptions.
"""

from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class SearchResult(Generic[T]):
    """Outcome of looking for a component (a tool, compiler metadata, ...)."""

    @property
    def is_available(self) -> bool:
        raise NotImplementedError

    @property
    def component(self) -> Optional[T]:
        return None

    def explain(self) -> str:
        raise NotImplementedError


class ComponentFound(SearchResult[T]):
    """A component that was found."""

    def __init__(self, component: T):
        self._component = component

    @property
    def is_available(self) -> bool:
        return True

    @property
    def component(self) -> T:
        return self._component

    def explain(self) -> str:
        return ""

    def __repr__(self) -> str:
        return f"ComponentFound({self._component!r})"


class ComponentNotFound(SearchResult[T]):
    """A component that does not exist or could not be run."""

    def __init__(self, message: str):
        self.message = message

    @property
    def is_available(self) -> bool:
        return False

    def explain(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ComponentNotFound({self.message!r})"


class BrokenResult(ComponentNotFound[T]):
    """A component that exists but did not look like what was expected."""

    def __repr__(self) -> str:
        return f"BrokenResult({self.message!r})"


class ToolChainAvailability(SearchResult[None]):
    """
    Aggregates the availability checks done while resolving a toolchain.

    The first failure recorded is the one reported.
    """

    def __init__(self):
        self._failure: Optional[str] = None

    def must_be_available(self, result: SearchResult) -> "ToolChainAvailability":
        if not result.is_available:
            self.unavailable(result.explain())
        return self

    def unavailable(self, message: str) -> "ToolChainAvailability":
        if self._failure is None:
            self._failure = message
        return self

    @property
    def is_available(self) -> bool:
        return self._failure is None

    def explain(self) -> str:
        return self._failure or ""
