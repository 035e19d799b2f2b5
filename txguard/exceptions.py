from typing import Any

__all__ = (
    "BorrowError",
    "RestoreError",
    "TransactionClosedError",
    "TxError",
)


class TxError(Exception): ...


class BorrowError(TxError): ...


class TransactionClosedError(AttributeError, TxError): ...


class RestoreError[T](TypeError, TxError):
    __slots__ = ("__class",)

    __class: type[T]

    def __init__(self, cls: type[T] | Any) -> None:
        super().__init__(
            f"`{cls}` can't be restored in place, "
            "borrow it through a `Ref` or another location."
        )
        self.__class = cls

    @property
    def cls(self) -> type[T]:
        return self.__class
