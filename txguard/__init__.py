from ._core.event import (
    Event,
    EventListener,
    TransactionClosed,
    TransactionCommitted,
    TransactionOpened,
    TransactionRolledBack,
    channel,
)
from ._core.guard import Transactional, Tx, transaction
from ._core.location import (
    AttributeLocation,
    CallbackLocation,
    InPlace,
    ItemLocation,
    Location,
    Ref,
)
from ._core.restore import register_restorer, restore

__all__ = (
    "AttributeLocation",
    "CallbackLocation",
    "Event",
    "EventListener",
    "InPlace",
    "ItemLocation",
    "Location",
    "Ref",
    "TransactionClosed",
    "TransactionCommitted",
    "TransactionOpened",
    "TransactionRolledBack",
    "Transactional",
    "Tx",
    "add_listener",
    "add_logger",
    "register_restorer",
    "remove_listener",
    "restore",
    "transaction",
)

add_listener = channel.add_listener
add_logger = channel.add_logger
remove_listener = channel.remove_listener

del channel
