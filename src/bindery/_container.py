from __future__ import annotations

import builtins
import importlib
import inspect
import logging
import threading
import typing
from contextlib import contextmanager
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    TypeVar,
    cast,
    overload,
)

from ._exceptions import (
    CircularDependencyError,
    NotFoundError,
    NotInstantiableError,
    UnresolvableDependencyError,
)
from ._metadata import ParameterDescriptor, ParameterKind, TypeMetadata


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    T = TypeVar("T")

    # A class, a dotted path to a class, or a factory taking the container
    Concrete = type | str | Callable[..., object]


@dataclass(frozen=True)
class Singleton:
    concrete: Concrete


@dataclass(frozen=True)
class Transient:
    concrete: Concrete


class Container:
    """Dependency injection container.

    - bind identifiers (classes or strings) as singletons or transients
    - alias identifiers to other identifiers
    - construct unbound classes by injecting their constructor parameters.
    """

    def __init__(self, *, metadata: TypeMetadata | None = None) -> None:
        self._bindings: dict[Any, Singleton | Transient] = {}
        self._instances: dict[Any, object] = {}
        self._aliases: dict[Any, Any] = {}
        self._metadata = metadata if metadata is not None else TypeMetadata()
        self._resolving: list[tuple[str, Any]] = []
        self._lock = threading.RLock()

    @property
    def metadata(self) -> TypeMetadata:
        return self._metadata

    def singleton(self, abstract: Any, concrete: Concrete) -> None:
        """Bind `abstract` so that `make` caches the first resolved instance.

        Example:
          container.singleton(Database, SqliteDatabase)
          container.singleton("config", lambda c: load_config())

        """
        with self._lock:
            self._bindings[abstract] = Singleton(concrete)
        logger.debug("Bound %s as singleton", _describe(abstract))

    def register(self, abstract: Any, concrete: Concrete) -> None:
        """Bind `abstract` so that every resolution produces a new instance."""
        with self._lock:
            self._bindings[abstract] = Transient(concrete)
        logger.debug("Bound %s as transient", _describe(abstract))

    def unbind(self, abstract: Any) -> None:
        """Remove the binding, the cached instance and every alias pointing at `abstract`."""
        with self._lock:
            self._bindings.pop(abstract, None)
            self._instances.pop(abstract, None)

            stale = [alias for alias, target in self._aliases.items() if target == abstract]
            for alias in stale:
                del self._aliases[alias]

        logger.debug("Unbound %s (%d alias(es) dropped)", _describe(abstract), len(stale))

    def alias(self, abstract: Any, alias: Any) -> None:
        with self._lock:
            self._aliases[alias] = abstract
        logger.debug("Aliased %s to %s", _describe(alias), _describe(abstract))

    def has(self, abstract: Any) -> bool:
        """True if `abstract` is bound or aliased. Says nothing about whether it can be built."""
        with self._lock:
            return abstract in self._bindings or abstract in self._aliases

    @overload
    def get(self, abstract: type[T]) -> T: ...

    @overload
    def get(self, abstract: Any) -> Any: ...

    def get(self, abstract: Any) -> Any:
        return self.make(abstract)

    @overload
    def make(self, abstract: type[T]) -> T: ...

    @overload
    def make(self, abstract: Any) -> Any: ...

    def make(self, abstract: Any) -> Any:
        """Resolve `abstract` to an instance.

        - If a binding exists: return the cached instance for singletons,
          otherwise resolve the binding and cache the result.
        - If an alias exists: make the aliased identifier.
        - Otherwise: construct it through `inject`.
        """
        with self._lock:
            binding = self._bindings.get(abstract)

            if binding is not None:
                if isinstance(binding, Singleton) and abstract in self._instances:
                    logger.debug("Returning cached %s", _describe(abstract))
                    return self._instances[abstract]

                instance = self._resolve_binding(abstract, binding)
                self._instances[abstract] = instance
                return instance

            if abstract in self._aliases:
                return self.make(self._aliases[abstract])

            return self.build(abstract)

    @overload
    def build(self, abstract: type[T]) -> T: ...

    @overload
    def build(self, abstract: Any) -> Any: ...

    def build(self, abstract: Any) -> Any:
        """Resolve `abstract` to a fresh instance, ignoring any cached one.

        The result is cached only when nothing is cached for `abstract` yet, so
        a singleton made earlier stays the one `make` returns.
        """
        with self._lock:
            binding = self._bindings.get(abstract)

            if binding is not None:
                instance = self._resolve_binding(abstract, binding)
                self._instances.setdefault(abstract, instance)
                return instance

            if abstract in self._aliases:
                return self.build(self._aliases[abstract])

            return self.inject(abstract)

    @overload
    def inject(self, concrete: type[T]) -> T: ...

    @overload
    def inject(self, concrete: str) -> Any: ...

    def inject(self, concrete: type | str) -> Any:
        """Construct `concrete` by resolving each constructor parameter.

        Bindings for `concrete` itself are ignored; its parameters still go
        through `make`.
        """
        with self._lock:
            cls = _locate(concrete)

            if _is_protocol(cls) or inspect.isabstract(cls):
                msg = f"Class {cls.__name__} is not instantiable"
                raise NotInstantiableError(msg, target=cls)

            descriptors = self._metadata.describe(cls)
            if not descriptors:
                return cls()

            with self._guard("class", cls):
                args, kwargs = self._resolve_dependencies(descriptors)
                return cls(*args, **kwargs)

    def _resolve_binding(self, abstract: Any, binding: Singleton | Transient) -> Any:
        concrete = binding.concrete

        with self._guard("binding", abstract):
            if inspect.isclass(concrete) or isinstance(concrete, str):
                return self.inject(concrete)

            if callable(concrete):
                return self._call_factory(concrete)

        msg = f"Binding for {_describe(abstract)} is neither a class nor a factory: {concrete!r}"
        raise NotInstantiableError(msg, target=concrete)

    def _call_factory(self, factory: Callable[..., object]) -> object:
        try:
            params = inspect.signature(factory).parameters
        except (TypeError, ValueError):
            return factory(self)

        if not params:
            return factory()

        return factory(self)

    def _resolve_dependencies(
        self, descriptors: tuple[ParameterDescriptor, ...]
    ) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for param in descriptors:
            if param.kind is ParameterKind.CLASS:
                value = self._resolve_class(param)
            else:
                value = self._resolve_primitive(param)

            if param.positional_only:
                args.append(value)
            else:
                kwargs[param.name] = value

        return args, kwargs

    def _resolve_primitive(self, param: ParameterDescriptor) -> Any:
        if param.has_default:
            return param.default

        msg = f"Unresolvable dependency resolving [{param.name}] in class {param.owner.__name__}"
        raise UnresolvableDependencyError(msg, parameter=param.name, owner=param.owner)

    def _resolve_class(self, param: ParameterDescriptor) -> Any:
        try:
            return self.make(param.target)
        except (NotInstantiableError, UnresolvableDependencyError) as e:
            if not param.has_default:
                raise

            logger.debug(
                "Using default for parameter '%s' of %s after failing to resolve %s: %s",
                param.name,
                param.owner.__name__,
                _describe(param.target),
                e,
            )
            return param.default

    @contextmanager
    def _guard(self, kind: str, key: Any) -> Iterator[None]:
        frame = (kind, key)
        if frame in self._resolving:
            start = self._resolving.index(frame)
            chain = tuple(k for _, k in self._resolving[start:]) + (key,)
            msg = f"Circular dependency detected: {' -> '.join(_describe(k) for k in chain)}"
            raise CircularDependencyError(msg, chain=chain)

        self._resolving.append(frame)
        try:
            yield
        finally:
            self._resolving.pop()


def _locate(concrete: Any) -> type:
    if inspect.isclass(concrete):
        return concrete

    if isinstance(concrete, str):
        return _import_class(concrete)

    msg = f"{concrete!r} is not a class"
    raise NotInstantiableError(msg, target=concrete)


def _import_class(path: str) -> type:
    """Find a class by dotted path, e.g. 'package.module.Outer.Inner'.

    Bare names are looked up in builtins.
    """
    parts = path.split(".")
    found: Any = None

    if len(parts) == 1:
        found = getattr(builtins, path, None)
    else:
        for i in range(len(parts) - 1, 0, -1):
            try:
                found = importlib.import_module(".".join(parts[:i]))
            except (ImportError, TypeError, ValueError):
                continue

            for attr in parts[i:]:
                found = getattr(found, attr, None)
            break

    if not inspect.isclass(found):
        msg = f"Class {path} does not exist"
        raise NotFoundError(msg, target=path)

    return found


def _describe(key: Any) -> str:
    if isinstance(key, str):
        return key
    return getattr(key, "__qualname__", None) or repr(key)


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def _is_protocol(tp: type) -> bool:
        return typing.is_protocol(tp)

else:

    def _is_protocol(tp: type) -> bool:
        """Detect whether 'tp' is itself a typing.Protocol (not merely an implementation of one)."""
        return bool(getattr(tp, "_is_protocol", False)) and issubclass(tp, cast("type", Protocol))
