from typing import Any, Callable, Optional


class RelayContext:
    """
    Process-wide handles built once at startup and shared by every request.

    Args:
        token_store: Object with ``get(user_id)`` and ``delete(user_id)``
        history_store: Object with ``append(record)`` and ``list_for_receiver(user_id, limit)``
        messenger: Object with ``send(payload)`` returning the message ID
        firebase_initialized: Whether the Firebase app came up at startup
        connection_probe: Optional callable run once after startup
    """

    def __init__(self,
                 token_store: Any,
                 history_store: Any,
                 messenger: Any,
                 firebase_initialized: bool = False,
                 connection_probe: Optional[Callable[[], bool]] = None):
        self.token_store = token_store
        self.history_store = history_store
        self.messenger = messenger
        self.firebase_initialized = firebase_initialized
        self.connection_probe = connection_probe
