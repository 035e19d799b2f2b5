from __future__ import annotations

import math
import operator
from collections.abc import Callable, Iterator
from copy import copy, deepcopy
from types import TracebackType
from typing import Any, Final, Self, override
from uuid import uuid4

from txguard._core.borrow import borrows
from txguard._core.common.invertible import Invertible
from txguard._core.event import (
    TransactionClosed,
    TransactionCommitted,
    TransactionOpened,
    TransactionRolledBack,
    channel,
)
from txguard._core.location import CallbackLocation, InPlace, Location
from txguard.exceptions import BorrowError, TransactionClosedError, TxError

type Copier[T] = Callable[[T], T]

_PRIVATE_PREFIX: Final[str] = "_Tx__"


class Tx[T](Invertible[T]):
    __slots__ = (
        "__baseline",
        "__closed",
        "__committed",
        "__copier",
        "__location",
        "__name",
        "__scratch",
    )

    __baseline: T
    __closed: bool
    __committed: bool
    __copier: Copier[T]
    __location: Location[T]
    __name: str
    __scratch: T

    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        target: Location[T] | Tx[T] | T,
        /,
        *,
        copier: Copier[T] = deepcopy,
        name: str | None = None,
    ) -> None:
        self.__closed = True
        self.__committed = False
        self.__copier = copier
        self.__name = name or f"tx@{uuid4().hex[:7]}"

        if isinstance(target, Tx):
            location = target.__lend()
        elif isinstance(target, Location):
            location = target
        else:
            location = InPlace(target)

        self.__location = location
        event = TransactionOpened(self.__name, str(location))

        with channel.dispatch(event):
            borrows.acquire(location.key, self.__name)

            try:
                value = location.get()
                self.__baseline = value
                self.__scratch = copier(value)
            except BaseException:
                borrows.release(location.key)
                raise

            self.__closed = False

    def __del__(self) -> None:
        try:
            closed = self.__closed
        except AttributeError:
            return

        if not closed:
            self.close()

    def __enter__(self) -> Self:
        self.__check_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    @override
    def __invert__(self) -> T:
        self.__check_open()
        self.__check_not_lent()
        return self.__scratch

    @property
    def is_committed(self) -> bool:
        return self.__committed

    @property
    def is_closed(self) -> bool:
        return self.__closed

    def commit(self) -> Self:
        value = ~self

        with channel.dispatch(TransactionCommitted(self.__name)):
            self.__baseline = self.__copier(value)
            self.__committed = True

        return self

    def rollback(self) -> Self:
        self.__check_open()
        self.__check_not_lent()

        with channel.dispatch(TransactionRolledBack(self.__name)):
            self.__scratch = self.__copier(self.__baseline)
            self.__committed = False

        return self

    def assign(self, value: T, /) -> T:
        previous = ~self
        self.__scratch = _unwrap(value)
        return previous

    def close(self) -> None:
        if self.__closed:
            return

        self.__check_not_lent()
        kept = self.__committed

        with channel.dispatch(TransactionClosed(self.__name, kept)):
            location = self.__location
            self.__closed = True

            try:
                location.set(self.__scratch if kept else self.__baseline)
            finally:
                borrows.release(location.key)
                del self.__baseline, self.__scratch

    """
    Attribute forwarding
    """

    def __getattr__(self, name: str) -> Any:
        if name.startswith(_PRIVATE_PREFIX):
            raise AttributeError(name)

        return getattr(~self, name)

    @override
    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith(_PRIVATE_PREFIX):
            object.__setattr__(self, name, value)
            return

        setattr(~self, name, _unwrap(value))

    @override
    def __delattr__(self, name: str) -> None:
        if name.startswith(_PRIVATE_PREFIX):
            object.__delattr__(self, name)
            return

        delattr(~self, name)

    def __get_class(self) -> type:
        try:
            return type(~self)
        except TxError:
            return type(self)

    __class__ = property(__get_class)  # type: ignore[assignment]

    @override
    def __dir__(self) -> list[str]:
        names = set(dir(type(self)))

        if not self.__closed:
            names.update(dir(self.__scratch))

        return sorted(names)

    """
    Value protocol forwarding
    """

    @override
    def __repr__(self) -> str:
        if self.__closed:
            return f"<{type(self).__name__} `{self.__name}` (closed)>"

        return repr(~self)

    @override
    def __str__(self) -> str:
        return str(~self)

    @override
    def __format__(self, format_spec: str) -> str:
        return format(~self, format_spec)

    def __bytes__(self) -> bytes:
        return bytes(~self)  # type: ignore[call-overload]

    def __bool__(self) -> bool:
        return bool(~self)

    def __len__(self) -> int:
        return len(~self)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[Any]:
        return iter(~self)  # type: ignore[call-overload]

    def __reversed__(self) -> Iterator[Any]:
        return reversed(~self)  # type: ignore[call-overload]

    def __contains__(self, item: Any, /) -> bool:
        return _unwrap(item) in ~self  # type: ignore[operator]

    def __getitem__(self, key: Any, /) -> Any:
        return (~self)[_unwrap(key)]  # type: ignore[index]

    def __setitem__(self, key: Any, value: Any, /) -> None:
        (~self)[_unwrap(key)] = _unwrap(value)  # type: ignore[index]

    def __delitem__(self, key: Any, /) -> None:
        del (~self)[_unwrap(key)]  # type: ignore[attr-defined]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return (~self)(*args, **kwargs)  # type: ignore[operator]

    def __copy__(self) -> T:
        return copy(~self)

    def __deepcopy__(self, memo: dict[int, Any]) -> T:
        return deepcopy(~self, memo)

    def __neg__(self) -> Any:
        return -(~self)  # type: ignore[operator]

    def __pos__(self) -> Any:
        return +(~self)  # type: ignore[operator]

    def __abs__(self) -> Any:
        return abs(~self)  # type: ignore[arg-type]

    def __int__(self) -> int:
        return int(~self)  # type: ignore[call-overload]

    def __float__(self) -> float:
        return float(~self)  # type: ignore[arg-type]

    def __complex__(self) -> complex:
        return complex(~self)  # type: ignore[arg-type]

    def __index__(self) -> int:
        return operator.index(~self)  # type: ignore[arg-type]

    def __round__(self, ndigits: int | None = None) -> Any:
        return round(~self, ndigits)  # type: ignore[call-overload]

    def __trunc__(self) -> Any:
        return math.trunc(~self)  # type: ignore[arg-type]

    def __floor__(self) -> Any:
        return math.floor(~self)  # type: ignore[arg-type]

    def __ceil__(self) -> Any:
        return math.ceil(~self)  # type: ignore[arg-type]

    """
    Internals
    """

    def __lend(self) -> Location[T]:
        self.__check_open()
        return CallbackLocation(
            identity=id(self),
            getter=lambda: self.__scratch,
            setter=self.__set_scratch,
            description=f"`{self.__name}`",
        )

    def __set_scratch(self, value: T) -> None:
        self.__scratch = value

    def __check_open(self) -> None:
        if self.__closed:
            raise TransactionClosedError(f"`{self.__name}` is closed.")

    def __check_not_lent(self) -> None:
        if (borrower := borrows.borrower(id(self))) is not None:
            raise BorrowError(f"`{self.__name}` is lent to `{borrower}`.")


def transaction[T](
    target: Location[T] | Tx[T] | T,
    /,
    *,
    copier: Copier[T] = deepcopy,
    name: str | None = None,
) -> Tx[T]:
    return Tx(target, copier=copier, name=name)


class Transactional:
    __slots__ = ()

    def tx(
        self,
        *,
        copier: Copier[Self] = deepcopy,
        name: str | None = None,
    ) -> Tx[Self]:
        return Tx(self, copier=copier, name=name)


def _unwrap(obj: Any) -> Any:
    if isinstance(obj, Tx):
        return ~obj

    return obj


def __forward(function: Callable[[Any, Any], Any]) -> Callable[[Tx[Any], Any], Any]:
    def method(self: Tx[Any], other: Any, /) -> Any:
        return function(~self, _unwrap(other))

    return method


def __forward_reflected(
    function: Callable[[Any, Any], Any],
) -> Callable[[Tx[Any], Any], Any]:
    def method(self: Tx[Any], other: Any, /) -> Any:
        return function(_unwrap(other), ~self)

    return method


def __forward_in_place(
    function: Callable[[Any, Any], Any],
) -> Callable[[Tx[Any], Any], Any]:
    def method(self: Tx[Any], other: Any, /) -> Tx[Any]:
        self.assign(function(~self, _unwrap(other)))
        return self

    return method


def __install_operators() -> None:
    binary_operators = (
        ("add", operator.add, operator.iadd),
        ("sub", operator.sub, operator.isub),
        ("mul", operator.mul, operator.imul),
        ("matmul", operator.matmul, operator.imatmul),
        ("truediv", operator.truediv, operator.itruediv),
        ("floordiv", operator.floordiv, operator.ifloordiv),
        ("mod", operator.mod, operator.imod),
        ("pow", operator.pow, operator.ipow),
        ("lshift", operator.lshift, operator.ilshift),
        ("rshift", operator.rshift, operator.irshift),
        ("and", operator.and_, operator.iand),
        ("xor", operator.xor, operator.ixor),
        ("or", operator.or_, operator.ior),
    )

    for name, function, in_place_function in binary_operators:
        setattr(Tx, f"__{name}__", __forward(function))
        setattr(Tx, f"__r{name}__", __forward_reflected(function))
        setattr(Tx, f"__i{name}__", __forward_in_place(in_place_function))

    setattr(Tx, "__divmod__", __forward(divmod))
    setattr(Tx, "__rdivmod__", __forward_reflected(divmod))

    for name in ("eq", "ne", "lt", "le", "gt", "ge"):
        setattr(Tx, f"__{name}__", __forward(getattr(operator, name)))


__install_operators()
