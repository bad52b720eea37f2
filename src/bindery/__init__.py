"""Minimal dependency injection container.

This package provides a small dependency injection container for Python: a
registry mapping identifiers (classes or strings) to classes or factories. It
supports singleton and transient bindings plus aliases, and auto-wires constructors.

Exports:
- `Container`: The container. `singleton`/`register` bind, `make`/`build`/`inject`
  resolve, `alias`/`unbind` manage identifiers, `get`/`has` form the lookup surface.
- `Singleton`, `Transient`: The two binding variants stored by the container.
- `TypeMetadata`, `ParameterDescriptor`, `ParameterKind`: Constructor metadata used
  for auto-wiring, derived by introspection or registered by hand.
- `ContainerInterface`, `ResolverInterface`: Structural protocols for the lookup
  and full resolution surfaces.
- Errors: `ContainerError` and its subclasses `NotInstantiableError`,
  `NotFoundError`, `UnresolvableDependencyError`, `CircularDependencyError`.
"""

from ._container import Container, Singleton, Transient
from ._exceptions import (
    CircularDependencyError,
    ContainerError,
    NotFoundError,
    NotInstantiableError,
    UnresolvableDependencyError,
)
from ._interfaces import ContainerInterface, ResolverInterface
from ._metadata import NO_DEFAULT, ParameterDescriptor, ParameterKind, TypeMetadata


__all__ = [
    "NO_DEFAULT",
    "CircularDependencyError",
    "Container",
    "ContainerError",
    "ContainerInterface",
    "NotFoundError",
    "NotInstantiableError",
    "ParameterDescriptor",
    "ParameterKind",
    "ResolverInterface",
    "Singleton",
    "Transient",
    "TypeMetadata",
    "UnresolvableDependencyError",
]
