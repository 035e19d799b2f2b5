from collections.abc import Iterator
from contextlib import contextmanager
from copy import deepcopy

from txguard import Location, Tx, transaction
from txguard._core.guard import Copier

__all__ = ("atomic",)


@contextmanager
def atomic[T](
    target: Location[T] | Tx[T] | T,
    /,
    *,
    copier: Copier[T] = deepcopy,
    name: str | None = None,
) -> Iterator[Tx[T]]:
    """
    Open a transaction that is committed when the block exits normally.
    An exception raised in the block reverts every change and propagates.
    """

    with transaction(target, copier=copier, name=name) as tx:
        yield tx
        tx.commit()
