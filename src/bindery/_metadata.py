"""Constructor metadata used for auto-wiring.

Python exposes constructor signatures at runtime, so descriptors are derived
with `inspect` by default. Types whose constructors cannot be introspected
(C-implemented types, classes built by metaclass magic) can have their
descriptors registered by hand instead; registered descriptors always win.
"""

from __future__ import annotations

import builtins
import inspect
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, get_type_hints

from ._exceptions import NotInstantiableError


if TYPE_CHECKING:
    from collections.abc import Iterable


logger = logging.getLogger(__name__)


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


class ParameterKind(Enum):
    PRIMITIVE = "primitive"
    CLASS = "class"


@dataclass(frozen=True)
class ParameterDescriptor:
    """One constructor parameter.

    `target` is the identifier resolved for `CLASS` parameters: the annotated
    class itself, or the string of a forward reference that could not be
    evaluated. It is ignored for `PRIMITIVE` parameters.
    """

    name: str
    kind: ParameterKind
    owner: type
    target: Any = None
    default: Any = NO_DEFAULT
    positional_only: bool = False
    keyword_only: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT


class TypeMetadata:
    """Registry mapping constructible types to their parameter descriptors."""

    def __init__(self) -> None:
        self._registered: dict[type, tuple[ParameterDescriptor, ...]] = {}
        self._derived: dict[type, tuple[ParameterDescriptor, ...]] = {}
        self._lock = threading.RLock()

    def register(self, cls: type, descriptors: Iterable[ParameterDescriptor]) -> None:
        with self._lock:
            self._registered[cls] = tuple(descriptors)
            self._derived.pop(cls, None)

    def is_registered(self, cls: type) -> bool:
        return cls in self._registered

    def describe(self, cls: type) -> tuple[ParameterDescriptor, ...]:
        with self._lock:
            if cls in self._registered:
                return self._registered[cls]

            if cls not in self._derived:
                self._derived[cls] = self._derive(cls)

            return self._derived[cls]

    def _derive(self, cls: type) -> tuple[ParameterDescriptor, ...]:
        if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
            return ()

        try:
            sig = inspect.signature(cls)
        except (TypeError, ValueError) as e:
            msg = f"Class {cls.__name__} is not instantiable: cannot read constructor signature ({e})"
            raise NotInstantiableError(msg, target=cls) from e

        hints = _get_init_type_hints(cls)

        descriptors = []
        for name, p in sig.parameters.items():
            if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
                continue

            ann = hints.get(name, p.annotation)
            target = _class_target(ann)
            descriptors.append(
                ParameterDescriptor(
                    name=name,
                    kind=ParameterKind.PRIMITIVE if target is None else ParameterKind.CLASS,
                    owner=cls,
                    target=target,
                    default=NO_DEFAULT if p.default is p.empty else p.default,
                    positional_only=p.kind is p.POSITIONAL_ONLY,
                    keyword_only=p.kind is p.KEYWORD_ONLY,
                )
            )

        return tuple(descriptors)


def _class_target(ann: Any) -> Any:
    """Return the identifier to resolve for a class-typed annotation, else None."""
    if ann is inspect.Parameter.empty:
        return None

    if isinstance(ann, str):
        # Unevaluated forward reference; builtin names stay primitive.
        name = ann.strip("'\"")
        if not name or name in ("Any", "typing.Any") or hasattr(builtins, name.split("[", 1)[0]):
            return None
        return name

    if ann is Any:
        return None

    if inspect.isclass(ann) and getattr(ann, "__module__", "") not in ("builtins", "typing"):
        return ann

    return None


def _get_init_type_hints(cls: type) -> dict[str, Any]:
    try:
        if cls.__init__ is object.__init__:
            # Constructor declared through __new__ (NamedTuple and friends)
            hints = get_type_hints(cls.__new__)
        else:
            hints = get_type_hints(inspect.getattr_static(cls, "__init__"))
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning(
            "'%s' name error retrieving %s (%s) type hints: %s", exc.name, cls.__name__, cls.__qualname__, exc
        )
        hints = {}

    return hints
