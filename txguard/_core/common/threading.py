from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock

__lock = RLock()


@contextmanager
def synchronized() -> Iterator[RLock]:
    with __lock:
        yield __lock
