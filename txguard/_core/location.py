from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, MutableMapping, MutableSequence
from dataclasses import dataclass
from typing import Any, override

from txguard._core.restore import check_restorable, restore


class Location[T](ABC):
    __slots__ = ()

    @property
    @abstractmethod
    def key(self) -> Hashable:
        raise NotImplementedError

    @abstractmethod
    def get(self) -> T:
        raise NotImplementedError

    @abstractmethod
    def set(self, value: T, /) -> None:
        raise NotImplementedError


class Ref[T](Location[T]):
    __slots__ = ("value", "__weakref__")

    value: T

    def __init__(self, value: T = None) -> None:  # type: ignore[assignment]
        self.value = value

    @override
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"

    @property
    @override
    def key(self) -> Hashable:
        return id(self)

    @override
    def get(self) -> T:
        return self.value

    @override
    def set(self, value: T, /) -> None:
        self.value = value


@dataclass(repr=False, eq=False, frozen=True, slots=True)
class AttributeLocation[T](Location[T]):
    obj: Any
    name: str

    @override
    def __str__(self) -> str:
        return f"attribute `{self.name}` of `{type(self.obj).__qualname__}`"

    @property
    @override
    def key(self) -> Hashable:
        return id(self.obj), self.name

    @override
    def get(self) -> T:
        return getattr(self.obj, self.name)

    @override
    def set(self, value: T, /) -> None:
        setattr(self.obj, self.name, value)


@dataclass(repr=False, eq=False, frozen=True, slots=True)
class ItemLocation[T](Location[T]):
    container: MutableMapping[Any, T] | MutableSequence[T]
    item: Any

    @override
    def __str__(self) -> str:
        return f"item `{self.item!r}` of `{type(self.container).__qualname__}`"

    @property
    @override
    def key(self) -> Hashable:
        return id(self.container), self.item

    @override
    def get(self) -> T:
        return self.container[self.item]

    @override
    def set(self, value: T, /) -> None:
        self.container[self.item] = value


@dataclass(repr=False, eq=False, frozen=True, slots=True)
class CallbackLocation[T](Location[T]):
    identity: Hashable
    getter: Callable[[], T]
    setter: Callable[[T], Any]
    description: str = "a callback location"

    @override
    def __str__(self) -> str:
        return self.description

    @property
    @override
    def key(self) -> Hashable:
        return self.identity

    @override
    def get(self) -> T:
        return self.getter()

    @override
    def set(self, value: T, /) -> None:
        self.setter(value)


@dataclass(repr=False, eq=False, frozen=True, slots=True)
class InPlace[T](Location[T]):
    obj: T

    def __post_init__(self) -> None:
        check_restorable(self.obj)

    @override
    def __str__(self) -> str:
        return f"`{type(self.obj).__qualname__}` object at {id(self.obj):#x}"

    @property
    @override
    def key(self) -> Hashable:
        return id(self.obj)

    @override
    def get(self) -> T:
        return self.obj

    @override
    def set(self, value: T, /) -> None:
        restore(self.obj, value)
