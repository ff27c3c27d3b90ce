"""Bridge a potentially slow dispatch to a bounded-time HTTP response.

``ResponseCoordinator.dispatch`` starts ``Dispatcher.emit`` as a task and
waits for it at most ``deadline`` seconds. The outcome is decided exactly
once: ``200`` when handlers finish, ``500`` when they fail, and ``202`` when
the deadline wins. A deferred task keeps running; its result is logged and
never re-raised.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import typing as typ
from http import HTTPStatus

from hookline.config import DEFAULT_RESPONSE_DEADLINE
from hookline.errors import HandlerError
from hookline.observability import DeliveryEventLogger

if typ.TYPE_CHECKING:
    from hookline.dispatcher import Dispatcher
    from hookline.events import WebhookEvent

__all__ = ["DispatchOutcome", "ResponseCoordinator"]

OK_BODY = "ok\n"
STILL_PROCESSING_BODY = "still processing\n"


@dc.dataclass(frozen=True, slots=True)
class DispatchOutcome:
    """Final status and plain-text body for one delivery."""

    status: HTTPStatus
    body: str

    @classmethod
    def ok(cls) -> DispatchOutcome:
        """Return the outcome for handlers that finished in time."""
        return cls(HTTPStatus.OK, OK_BODY)

    @classmethod
    def still_processing(cls) -> DispatchOutcome:
        """Return the outcome for a dispatch that outlived the deadline."""
        return cls(HTTPStatus.ACCEPTED, STILL_PROCESSING_BODY)

    @classmethod
    def failed(cls, error: HandlerError) -> DispatchOutcome:
        """Return the outcome for handlers that failed in time."""
        return cls(HTTPStatus.INTERNAL_SERVER_ERROR, str(error))


class ResponseCoordinator:
    """Race each dispatch against its own response deadline.

    Parameters
    ----------
    dispatcher
        Event bus whose ``emit`` is raced.
    deadline
        Seconds to wait before answering ``202``.
    event_logger
        Structured logger for dispatch and background outcomes.

    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        deadline: float = DEFAULT_RESPONSE_DEADLINE,
        event_logger: DeliveryEventLogger | None = None,
    ) -> None:
        """Configure the coordinator; no tasks are started until dispatch."""
        self._dispatcher = dispatcher
        self._deadline = deadline
        self._event_logger = event_logger or DeliveryEventLogger()
        self._background: set[asyncio.Task[None]] = set()

    @property
    def deadline(self) -> float:
        """Return the response deadline in seconds."""
        return self._deadline

    @property
    def in_flight(self) -> int:
        """Return the number of deferred dispatches still running."""
        return len(self._background)

    async def dispatch(self, event: WebhookEvent) -> DispatchOutcome:
        """Emit ``event`` and decide the response within the deadline."""
        task = asyncio.create_task(
            self._dispatcher.emit(event), name=f"webhook-dispatch-{event.id}"
        )
        try:
            done, _pending = await asyncio.wait({task}, timeout=self._deadline)
        except asyncio.CancelledError:
            # The request went away; handlers still run to completion.
            self._defer(task, event)
            raise

        if not done:
            self._defer(task, event)
            return DispatchOutcome.still_processing()

        if task.cancelled():
            cancelled = HandlerError(
                [RuntimeError("CancelledError: dispatch was cancelled")], event
            )
            self._event_logger.log_dispatch_failed(cancelled)
            return DispatchOutcome.failed(cancelled)

        error = task.exception()
        if error is None:
            self._event_logger.log_dispatch_succeeded(event)
            return DispatchOutcome.ok()
        if isinstance(error, HandlerError):
            self._event_logger.log_dispatch_failed(error)
            return DispatchOutcome.failed(error)
        raise error

    def _defer(self, task: asyncio.Task[None], event: WebhookEvent) -> None:
        self._event_logger.log_dispatch_deferred(event, self._deadline)
        self._background.add(task)

        def _finished(finished: asyncio.Task[None]) -> None:
            self._background.discard(finished)
            if finished.cancelled():
                self._event_logger.log_background_failed(
                    event, asyncio.CancelledError()
                )
                return
            error = finished.exception()
            if error is None:
                self._event_logger.log_background_completed(event)
            else:
                self._event_logger.log_background_failed(event, error)

        task.add_done_callback(_finished)

    async def drain(self, timeout: float | None = None) -> int:
        """Wait for deferred dispatches and return how many are still running.

        Failures were already logged by the done callbacks and are not raised.
        """
        pending = tuple(self._background)
        if not pending:
            return 0
        await asyncio.wait(pending, timeout=timeout)
        return self.in_flight
