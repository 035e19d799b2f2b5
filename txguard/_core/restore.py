from array import array
from collections.abc import (
    Callable,
    Iterator,
    MutableMapping,
    MutableSequence,
    MutableSet,
)
from functools import singledispatch
from types import NoneType
from typing import Any

from txguard.exceptions import RestoreError

type Restorer[T] = Callable[[T, T], None]

_IMMUTABLE_TYPES = (
    NoneType,
    bool,
    bytes,
    complex,
    float,
    frozenset,
    int,
    range,
    str,
    tuple,
)


def check_restorable(obj: Any) -> None:
    cls = type(obj)

    if isinstance(obj, _IMMUTABLE_TYPES):
        raise RestoreError(cls)

    if restore.dispatch(cls) is restore.dispatch(object) and not _has_state(obj):
        raise RestoreError(cls)


@singledispatch
def restore(target: Any, source: Any, /) -> None:
    if target is source:
        return

    check_restorable(target)
    _restore_state(target, source)


@restore.register
def _(target: list | bytearray | array, source: list | bytearray | array, /) -> None:
    if target is not source:
        target[:] = source
        _restore_state(target, source)


@restore.register
def _(target: MutableSequence, source: MutableSequence, /) -> None:
    if target is not source:
        target.clear()
        target.extend(source)
        _restore_state(target, source)


@restore.register
def _(target: MutableMapping, source: MutableMapping, /) -> None:
    if target is not source:
        target.clear()
        target.update(source)
        _restore_state(target, source)


@restore.register
def _(target: MutableSet, source: MutableSet, /) -> None:
    if target is not source:
        target.clear()
        target |= source
        _restore_state(target, source)


def register_restorer[T](cls: type[T], function: Restorer[T] | None = None, /):  # type: ignore[no-untyped-def]
    def decorator(wp):  # type: ignore[no-untyped-def]
        restore.register(cls, wp)
        return wp

    return decorator(function) if function else decorator


def _restore_state(target: Any, source: Any) -> None:
    state = dict(_iter_state(source))

    for name, _ in tuple(_iter_state(target)):
        if name not in state:
            object.__delattr__(target, name)

    for name, value in state.items():
        object.__setattr__(target, name, value)


def _has_state(obj: Any) -> bool:
    return hasattr(obj, "__dict__") or any(_iter_slots(type(obj)))


def _iter_state(obj: Any) -> Iterator[tuple[str, Any]]:
    try:
        variables = vars(obj)
    except TypeError:
        variables = {}

    yield from tuple(variables.items())

    for name in _iter_slots(type(obj)):
        if name in variables:
            continue

        try:
            yield name, object.__getattribute__(obj, name)
        except AttributeError:
            continue


def _iter_slots(cls: type) -> Iterator[str]:
    for klass in cls.__mro__:
        slots = vars(klass).get("__slots__", ())

        if isinstance(slots, str):
            slots = (slots,)

        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue

            if name.startswith("__") and not name.endswith("__"):
                name = f"_{klass.__name__.lstrip("_")}{name}"

            yield name
