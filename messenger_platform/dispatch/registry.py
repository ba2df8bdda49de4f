"""Category to callback registry owned by a single dispatcher."""

from typing import Any, Awaitable, Callable

from messenger_platform.dispatch.categories import Category, to_category

WebhookCallback = Callable[[Any], Awaitable[None] | None]


class CallbackRegistry:
    """Ordered callback lists per category.

    Insertion order is kept and duplicates are allowed. There is no way to
    remove a callback once registered.
    """

    def __init__(self) -> None:
        self._callbacks: dict[Category, list[WebhookCallback]] = {}

    def register(self, category: Category | str, callback: WebhookCallback) -> None:
        """Append ``callback`` to the list for ``category``.

        Raises:
            TypeError: If ``callback`` is not callable
            ValueError: If ``category`` is an unknown category name
        """
        if not callable(callback):
            raise TypeError(f"Callback must be callable, got {type(callback).__name__}")
        self._callbacks.setdefault(to_category(category), []).append(callback)

    def get_callbacks(self, category: Category | str) -> list[WebhookCallback]:
        """Return a snapshot of the callbacks for ``category`` (empty if none)."""
        return list(self._callbacks.get(to_category(category), ()))

    def categories(self) -> list[Category]:
        """Categories with at least one callback, in first-registration order."""
        return list(self._callbacks)

    def __len__(self) -> int:
        return sum(len(callbacks) for callbacks in self._callbacks.values())
