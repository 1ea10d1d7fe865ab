"""Structured telemetry events for tree, file and storage operations.

Every mutating or byte-moving operation emits a ``DriveEvent``. The default
sink writes each event as a structured record on the ``opendrive.telemetry``
logger; the JSON formatter turns that into one line per event, which is what
the log-shipping pipeline consumes. Extra async handlers (a broker producer,
an audit writer) can be registered on the bus.
"""

import time
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from opendrive.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)
telemetry_logger = get_logger("opendrive.telemetry")

EventHandler = Callable[["DriveEvent"], Awaitable[None]]


@dataclass
class DriveEvent:
    operation: str
    success: bool = True
    owner_id: Optional[str] = None
    entity_id: Optional[str] = None
    size: Optional[int] = None
    duration_ms: Optional[float] = None
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        details = data.pop("details")
        data.update(details)
        return {k: v for k, v in data.items() if v is not None}


class EventBus:
    """Dispatches telemetry events to registered handlers.

    Handlers run sequentially in registration order. A failing handler is
    logged and skipped; telemetry never breaks the operation it describes.
    """

    def __init__(self, log_events: bool = True):
        self._handlers: List[EventHandler] = []
        self.log_events = log_events

    def register(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def unregister(self, handler: EventHandler) -> bool:
        try:
            self._handlers.remove(handler)
            return True
        except ValueError:
            return False

    async def emit(self, event: DriveEvent) -> None:
        if self.log_events:
            log_with_context(
                telemetry_logger,
                "info" if event.success else "warning",
                f"{event.operation} {'succeeded' if event.success else 'failed'}",
                event=event.to_dict(),
            )

        for handler in self._handlers:
            try:
                await handler(event)
            except Exception:
                logger.warning(f"Telemetry handler {handler!r} failed for {event.operation}", exc_info=True)

    async def publish(self, operation: str, **fields: Any) -> None:
        """Build a DriveEvent from keyword fields and emit it."""
        known = {k: fields.pop(k) for k in list(fields) if k in DriveEvent.__dataclass_fields__}
        await self.emit(DriveEvent(operation=operation, details=fields, **known))

    @asynccontextmanager
    async def track(self, operation: str, **fields: Any):
        """Time the wrapped block and emit one success or failure event.

        The yielded dict can be filled with fields only known at the end
        (byte counts, generated ids).
        """
        started = time.perf_counter()
        extra: Dict[str, Any] = {}
        try:
            yield extra
        except Exception as e:
            duration = round((time.perf_counter() - started) * 1000, 2)
            await self.publish(operation, success=False, duration_ms=duration, error=str(e), **{**fields, **extra})
            raise
        duration = round((time.perf_counter() - started) * 1000, 2)
        await self.publish(operation, duration_ms=duration, **{**fields, **extra})

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def clear(self) -> None:
        self._handlers.clear()


event_bus = EventBus()
