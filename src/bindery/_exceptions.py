from __future__ import annotations

from typing import Any


class ContainerError(RuntimeError):
    pass


class NotInstantiableError(ContainerError):
    """The target type cannot be located or constructed."""

    def __init__(self, message: str, *, target: Any = None) -> None:
        super().__init__(message)
        self.target = target


class NotFoundError(NotInstantiableError, KeyError):
    """A string identifier does not name any locatable class."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class UnresolvableDependencyError(ContainerError):
    def __init__(self, message: str, *, parameter: str | None = None, owner: type | None = None) -> None:
        super().__init__(message)
        self.parameter = parameter
        self.owner = owner


class CircularDependencyError(ContainerError):
    def __init__(self, message: str, *, chain: tuple[Any, ...] = ()) -> None:
        super().__init__(message)
        self.chain = chain
