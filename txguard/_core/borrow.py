from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Self

from txguard._core.common.threading import synchronized
from txguard.exceptions import BorrowError


@dataclass(repr=False, eq=False, frozen=True, slots=True)
class BorrowRegistry:
    __borrowers: dict[Hashable, str] = field(default_factory=dict, init=False)

    def __contains__(self, key: Hashable, /) -> bool:
        return key in self.__borrowers

    def __len__(self) -> int:
        return len(self.__borrowers)

    def acquire(self, key: Hashable, borrower: str) -> Self:
        with synchronized():
            if (current := self.__borrowers.get(key)) is not None:
                raise BorrowError(f"Location is already borrowed by `{current}`.")

            self.__borrowers[key] = borrower

        return self

    def release(self, key: Hashable) -> Self:
        with synchronized():
            self.__borrowers.pop(key, None)

        return self

    def borrower(self, key: Hashable) -> str | None:
        return self.__borrowers.get(key)


borrows = BorrowRegistry()
