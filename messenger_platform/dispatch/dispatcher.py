"""Generic webhook dispatcher: validate, filter, classify, fan out.

A dispatcher owns one :class:`CallbackRegistry` and one set of
:class:`DispatcherOptions`. Family dispatchers (messages, postbacks, echoes)
only supply the payload model and the classification rules; everything else,
including the per-callback failure boundary, lives here.

Dispatch is strictly sequential: entries, events and callbacks run in
delivery and registration order, and every callback is awaited before the
next one starts. No timeout is applied, so a callback that never returns
holds up the remaining callbacks of that event.
"""

import inspect
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, Iterable, TypeVar

import logfire
from pydantic import BaseModel, ConfigDict, ValidationError

from messenger_platform.constants import WEBHOOK_OBJECT_PAGE
from messenger_platform.dispatch.categories import Category, EventCategory
from messenger_platform.dispatch.registry import CallbackRegistry, WebhookCallback
from messenger_platform.models.messenger import WebhookEntry, WebhookPayload

EventT = TypeVar("EventT", bound=BaseModel)


class WebhookStructureError(ValueError):
    """Raised when a webhook payload is not a Page webhook delivery.

    This is the only error ``process_webhook`` lets through to its caller.
    """


class DispatcherOptions(BaseModel):
    """Runtime options read on every ``process_webhook`` call."""

    model_config = ConfigDict(extra="forbid")

    page_id: str | None = None
    enable_logging: bool = False
    handle_standby_events: bool = True


class WebhookDispatcher(Generic[EventT]):
    """Routes webhook events to the callbacks registered for their category.

    Subclasses set :attr:`family`, :attr:`payload_model` and
    :attr:`event_model` and implement :meth:`classify`. They may also override :meth:`categories_for`,
    :meth:`accepts` and :meth:`events_for` to change which categories an event
    fans out to, which events are skipped and which entry lists are read.
    """

    family: ClassVar[str] = "webhook"
    payload_model: ClassVar[type[WebhookPayload]] = WebhookPayload
    event_model: ClassVar[type[BaseModel]] = BaseModel

    def __init__(self, options: DispatcherOptions | None = None, **overrides: Any):
        self._registry = CallbackRegistry()
        self._options = options or DispatcherOptions()
        if overrides:
            self.set_options(**overrides)

    # ------------------------------------------------------------------
    # Configuration and registration
    # ------------------------------------------------------------------

    @property
    def options(self) -> DispatcherOptions:
        return self._options

    @property
    def registry(self) -> CallbackRegistry:
        return self._registry

    def set_options(self, **changes: Any) -> DispatcherOptions:
        """Merge ``changes`` into the current options.

        Raises:
            pydantic.ValidationError: On unknown option names or bad values
        """
        self._options = DispatcherOptions.model_validate(
            {**self._options.model_dump(), **changes}
        )
        return self._options

    def register(
        self, category: Category | str, callback: WebhookCallback
    ) -> WebhookCallback:
        """Register ``callback`` for ``category`` and return it unchanged."""
        self._registry.register(category, callback)
        return callback

    register_for_category = register

    def on_all(self, callback: WebhookCallback) -> WebhookCallback:
        """Register ``callback`` for every event of this family."""
        return self.register(EventCategory.ALL, callback)

    def _on(self, category_or_callback: Any, callback: WebhookCallback | None):
        """Shared body of ``on_message`` / ``on_postback`` / ``on_echo_message``.

        Called with just a callback it registers for every event; called with
        a category and no callback it returns a decorator.
        """
        if callback is None:
            if callable(category_or_callback):
                return self.on_all(category_or_callback)

            def decorator(func: WebhookCallback) -> WebhookCallback:
                return self.register(category_or_callback, func)

            return decorator
        return self.register(category_or_callback, callback)

    # ------------------------------------------------------------------
    # Family hooks
    # ------------------------------------------------------------------

    def classify(self, event: EventT) -> EventCategory:
        raise NotImplementedError

    def categories_for(self, event: EventT) -> list[Category]:
        """Categories whose callbacks run for ``event``, before ``all``."""
        return [self.classify(event)]

    def accepts(self, event: EventT) -> bool:
        """Whether ``event`` is dispatched at all."""
        return True

    def events_for(self, entry: WebhookEntry) -> Iterable[EventT]:
        return entry.messaging

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def parse_payload(self, payload: WebhookPayload | Mapping[str, Any]) -> WebhookPayload:
        """Check the envelope and return it as this family's payload model.

        Events that do not match the family's event shape are dropped (with a
        warning when logging is enabled); only a broken envelope is an error.

        Raises:
            WebhookStructureError: If ``object`` is not ``"page"``, ``entry``
                is not a list of entries, or an entry's event lists are not
                lists
        """
        if isinstance(payload, WebhookPayload):
            object_type = payload.object
        elif isinstance(payload, Mapping):
            object_type = payload.get("object")
        else:
            raise WebhookStructureError("Invalid webhook payload")

        if object_type != WEBHOOK_OBJECT_PAGE:
            raise WebhookStructureError("Invalid webhook object type")

        if isinstance(payload, self.payload_model):
            return payload
        if isinstance(payload, WebhookPayload):
            payload = payload.model_dump()

        entries = payload.get("entry") or []
        if not isinstance(entries, list):
            raise WebhookStructureError("Invalid webhook payload")

        try:
            return self.payload_model.model_validate(
                {**payload, "entry": [self._parse_entry(entry) for entry in entries]}
            )
        except ValidationError as e:
            raise WebhookStructureError(f"Invalid {self.family} webhook payload") from e

    def _parse_entry(self, entry: Any) -> dict[str, Any]:
        if not isinstance(entry, Mapping):
            raise WebhookStructureError("Invalid webhook payload")

        parsed = dict(entry)
        for key in ("messaging", "standby"):
            events = entry.get(key) or []
            if not isinstance(events, list):
                raise WebhookStructureError("Invalid webhook payload")
            parsed[key] = [
                event
                for event in (self._parse_event(raw, entry.get("id")) for raw in events)
                if event is not None
            ]
        return parsed

    def _parse_event(self, raw: Any, page_id: Any) -> EventT | None:
        try:
            return self.event_model.model_validate(raw)
        except ValidationError as e:
            if self._options.enable_logging:
                logfire.warn(
                    "Dropping malformed webhook event",
                    family=self.family,
                    page_id=page_id,
                    error_count=e.error_count(),
                )
            return None

    async def process_webhook(self, payload: WebhookPayload | Mapping[str, Any]) -> None:
        """Dispatch every event of ``payload``.

        Raises:
            WebhookStructureError: Before any callback runs, when the payload
                is not a Page webhook. Callback failures never propagate.
        """
        await self.dispatch_payload(self.parse_payload(payload))

    async def dispatch_payload(self, parsed: WebhookPayload) -> None:
        """Dispatch an already parsed payload entry by entry."""
        options = self._options

        for entry in parsed.entry:
            if options.page_id and entry.id != options.page_id:
                if options.enable_logging:
                    logfire.warn(
                        "Skipping webhook entry for unexpected page",
                        family=self.family,
                        page_id=entry.id,
                        expected_page_id=options.page_id,
                    )
                continue

            for event in self.events_for(entry):
                await self.dispatch_event(event)

    async def dispatch_event(self, event: EventT) -> None:
        """Run the callbacks for one event: its categories first, then ``all``."""
        if not self.accepts(event):
            return

        categories = self.categories_for(event)

        if self._options.enable_logging:
            logfire.info(
                "Processing webhook event",
                family=self.family,
                categories=[str(category) for category in categories],
            )

        for category in [*categories, EventCategory.ALL]:
            for callback in self._registry.get_callbacks(category):
                await self._invoke(category, callback, event)

    async def _invoke(
        self, category: Category, callback: WebhookCallback, event: EventT
    ) -> Exception | None:
        """Run one callback inside its own failure boundary.

        Returns the exception the callback raised, or ``None``. The exception
        is logged when logging is enabled and never re-raised.
        """
        try:
            result = callback(event)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            if self._options.enable_logging:
                logfire.error(
                    "Webhook callback failed",
                    family=self.family,
                    category=str(category),
                    callback=getattr(callback, "__qualname__", repr(callback)),
                    error=str(e),
                    error_type=type(e).__name__,
                )
            return e
        return None
