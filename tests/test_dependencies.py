from abc import ABC, abstractmethod
from datetime import date
from typing import Any, NamedTuple, Optional, Protocol

import pytest

from bindery import Container, ContainerError, NotInstantiableError, UnresolvableDependencyError


class Repository(ABC):
    @abstractmethod
    def get(self) -> int: ...


class SqlRepository(Repository):
    def get(self) -> int:
        return 1


class Clock(Protocol):
    def now(self) -> float: ...


class FixedClock:
    def now(self) -> float:
        return 0.0


class Db: ...


def test_resolve_autowires_recursively_from_annotations():
    c = Container()

    class Repo:
        def __init__(self, db: Db):
            self.db = db

    class Service:
        def __init__(self, repo: Repo):
            self.repo = repo

    svc = c.make(Service)
    assert isinstance(svc, Service)
    assert isinstance(svc.repo, Repo)
    assert isinstance(svc.repo.db, Db)


def test_abstract_class_is_not_instantiable():
    c = Container()

    with pytest.raises(NotInstantiableError) as ctx:
        c.inject(Repository)

    assert ctx.value.target is Repository


def test_protocol_is_not_instantiable():
    c = Container()

    with pytest.raises(NotInstantiableError):
        c.make(Clock)


def test_binding_abstract_class_to_implementation():
    c = Container()
    c.singleton(Repository, SqlRepository)

    class Service:
        def __init__(self, repo: Repository):
            self.repo = repo

    svc = c.make(Service)
    assert isinstance(svc.repo, SqlRepository)
    assert svc.repo is c.make(Repository)


def test_binding_protocol_to_implementation():
    c = Container()
    c.register(Clock, FixedClock)

    class Scheduler:
        def __init__(self, clock: Clock):
            self.clock = clock

    assert c.make(Scheduler).clock.now() == 0.0


def test_not_instantiable_dependency_without_default_raises():
    c = Container()

    class Service:
        def __init__(self, repo: Repository):
            self.repo = repo

    with pytest.raises(NotInstantiableError):
        c.make(Service)


def test_not_instantiable_dependency_with_default_uses_default():
    c = Container()
    fallback = SqlRepository()

    class Service:
        def __init__(self, repo: Repository = fallback):
            self.repo = repo

    assert c.make(Service).repo is fallback


def test_unresolvable_nested_dependency_with_default_uses_default():
    c = Container()

    class Port:
        def __init__(self, number: int):
            self.number = number

    class Server:
        def __init__(self, port: Port = None):
            self.port = port

    assert c.make(Server).port is None


def test_primitive_default_is_passed_unchanged():
    c = Container()
    marker = object()

    class WithDefault:
        def __init__(self, value=marker, port: int = 5555):
            self.value = value
            self.port = port

    obj = c.make(WithDefault)
    assert obj.value is marker
    assert obj.port == 5555


def test_unsatisfied_primitive_raises():
    c = Container()

    class ClassWithParams:
        def __init__(self, param: str):
            self.param = param

    with pytest.raises(UnresolvableDependencyError) as ctx:
        c.make(ClassWithParams)

    assert ctx.value.parameter == "param"
    assert ctx.value.owner is ClassWithParams


def test_string_binding_is_not_used_for_primitive_parameter():
    c = Container()
    c.singleton("port", lambda: 1234)

    class WithDefault:
        def __init__(self, port: int = 5555):
            self.port = port

    assert c.make(WithDefault).port == 5555


def test_optional_annotation_is_primitive():
    c = Container()

    class Service:
        def __init__(self, db: Optional[Db] = None):
            self.db = db

    assert c.make(Service).db is None


def test_positional_only_and_keyword_only_parameters():
    c = Container()

    class Mixed:
        def __init__(self, db: Db, /, *, retries: int = 3):
            self.db = db
            self.retries = retries

    obj = c.make(Mixed)
    assert isinstance(obj.db, Db)
    assert obj.retries == 3


def test_variadic_parameters_are_left_empty():
    c = Container()

    class Base:
        def __init__(self, value: int = 7, *args, **kwargs):
            self.value = value
            self.args = args
            self.kwargs = kwargs

    class Derived(Base): ...

    child = c.make(Derived)
    assert isinstance(child, Derived)
    assert child.value == 7
    assert child.args == ()
    assert child.kwargs == {}


def test_inherited_constructor_is_injected():
    c = Container()

    class Base:
        def __init__(self, db: Db):
            self.db = db

    class Derived(Base): ...

    assert isinstance(c.make(Derived).db, Db)


def test_dependency_resolved_through_container_bindings():
    c = Container()
    shared = Db()
    c.singleton(Db, lambda: shared)

    class Repo:
        def __init__(self, db: Db):
            self.db = db

    assert c.inject(Repo).db is shared


def test_inject_ignores_binding_for_target():
    c = Container()

    class Special(SqlRepository): ...

    c.singleton(SqlRepository, Special)

    assert type(c.inject(SqlRepository)) is SqlRepository
    assert type(c.make(SqlRepository)) is Special


def test_constructor_errors_propagate():
    c = Container()

    class Exploding:
        def __init__(self, db: Db):
            msg = "cannot start"
            raise ValueError(msg)

    with pytest.raises(ValueError, match="cannot start"):
        c.make(Exploding)


def test_forward_reference_with_default_uses_default():
    c = Container()

    class Lazy:
        def __init__(self, missing: "Missing" = None):  # noqa: F821
            self.missing = missing

    assert c.make(Lazy).missing is None


class Point(NamedTuple):
    x: int
    y: int = 0


class Origin(NamedTuple):
    x: int = 0
    y: int = 0


def test_named_tuple_required_field_raises_unresolvable():
    c = Container()

    with pytest.raises(UnresolvableDependencyError) as ctx:
        c.make(Point)

    assert ctx.value.parameter == "x"
    assert ctx.value.owner is Point


def test_named_tuple_defaults_are_used():
    c = Container()

    assert c.make(Origin) == Origin(0, 0)


def test_named_tuple_dependency_with_default_uses_default():
    c = Container()

    class Shape:
        def __init__(self, anchor: Point = None):
            self.anchor = anchor

    assert c.make(Shape).anchor is None


def test_builtin_class_without_usable_constructor_raises_container_error():
    c = Container()

    with pytest.raises(ContainerError):
        c.make(date)


def test_builtin_class_dependency_with_default_uses_default():
    c = Container()

    class Event:
        def __init__(self, day: date = None):
            self.day = day

    assert c.make(Event).day is None


def test_any_annotation_is_primitive():
    c = Container()

    class Holder:
        def __init__(self, value: Any = None, label: "Any" = "none"):
            self.value = value
            self.label = label

    holder = c.make(Holder)
    assert holder.value is None
    assert holder.label == "none"


def test_any_annotation_without_default_raises_unresolvable():
    c = Container()

    class Holder:
        def __init__(self, value: Any):
            self.value = value

    with pytest.raises(UnresolvableDependencyError):
        c.make(Holder)
