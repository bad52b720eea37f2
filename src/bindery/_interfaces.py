from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ContainerInterface(Protocol):
    """Minimal lookup surface: fetch an entry, or ask whether one is known.

    `has(id)` returning True does not mean `get(id)` cannot raise; it only
    means the identifier is bound or aliased.
    """

    def get(self, abstract: Any) -> Any: ...

    def has(self, abstract: Any) -> bool: ...


@runtime_checkable
class ResolverInterface(ContainerInterface, Protocol):
    def singleton(self, abstract: Any, concrete: Any) -> None: ...

    def register(self, abstract: Any, concrete: Any) -> None: ...

    def unbind(self, abstract: Any) -> None: ...

    def alias(self, abstract: Any, alias: Any) -> None: ...

    def make(self, abstract: Any) -> Any: ...

    def build(self, abstract: Any) -> Any: ...

    def inject(self, concrete: type | str) -> Any: ...
