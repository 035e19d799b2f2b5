from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager, suppress
from dataclasses import dataclass, field
from logging import Logger, getLogger
from typing import ContextManager, Self, override
from weakref import WeakSet

"""
Events
"""


@dataclass(frozen=True, slots=True)
class Event(ABC):
    name: str


@dataclass(frozen=True, slots=True)
class TransactionOpened(Event):
    location: str

    @override
    def __str__(self) -> str:
        return f"`{self.name}` has been opened on {self.location}."


@dataclass(frozen=True, slots=True)
class TransactionCommitted(Event):
    @override
    def __str__(self) -> str:
        return f"`{self.name}` has been committed."


@dataclass(frozen=True, slots=True)
class TransactionRolledBack(Event):
    @override
    def __str__(self) -> str:
        return f"`{self.name}` has been rolled back to its baseline."


@dataclass(frozen=True, slots=True)
class TransactionClosed(Event):
    kept: bool

    @override
    def __str__(self) -> str:
        outcome = "changes kept" if self.kept else "changes reverted"
        return f"`{self.name}` has been closed ({outcome})."


"""
Channel
"""


class EventListener(ABC):
    __slots__ = ("__weakref__",)

    @abstractmethod
    def on_event(self, event: Event, /) -> ContextManager[None] | None:
        raise NotImplementedError


@dataclass(repr=False, eq=False, frozen=True, slots=True)
class EventChannel:
    __listeners: WeakSet[EventListener] = field(default_factory=WeakSet, init=False)
    __loggers: list[Logger] = field(
        default_factory=lambda: [getLogger("txguard")],
        init=False,
    )

    @contextmanager
    def dispatch(self, event: Event) -> Iterator[None]:
        with ExitStack() as stack:
            for listener in tuple(self.__listeners):
                context_manager = listener.on_event(event)

                if context_manager is None:
                    continue

                stack.enter_context(context_manager)

            yield
            self.__debug(event)

    def add_listener(self, listener: EventListener) -> Self:
        self.__listeners.add(listener)
        return self

    def remove_listener(self, listener: EventListener) -> Self:
        with suppress(KeyError):
            self.__listeners.remove(listener)

        return self

    def add_logger(self, logger: Logger) -> Self:
        self.__loggers.append(logger)
        return self

    def __debug(self, message: object) -> None:
        for logger in tuple(self.__loggers):
            logger.debug(message)


channel = EventChannel()
