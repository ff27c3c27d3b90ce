"""Health probe resources for liveness and readiness checks.

Neither probe touches handlers or the network; readiness additionally
reports how many deferred webhook dispatches are still running. Only ``GET``
is served; any other method is passed to ``unrouted`` so the probes answer
like every other unknown route.

Usage
-----
Register health endpoints on the Falcon app::

    app.add_route("/health", HealthResource(unrouted=receiver.handle_unrouted))
    app.add_route("/ready", ReadyResource(coordinator))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import falcon

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from falcon.asgi import Request, Response

    from hookline.coordinator import ResponseCoordinator

__all__ = ["HealthResource", "ReadyResource", "UnroutedResponder"]

UnroutedResponder = typ.Callable[["Request", "Response"], "cabc.Awaitable[None]"]


class _ProbeResource:
    """Base for probes that only answer ``GET``."""

    def __init__(self, *, unrouted: UnroutedResponder | None = None) -> None:
        """Optionally route other methods to ``unrouted``."""
        self._unrouted = unrouted

    async def on_post(self, req: Request, resp: Response) -> None:
        """Answer a method the probe does not serve."""
        if self._unrouted is None:
            raise falcon.HTTPMethodNotAllowed(["GET"])
        await self._unrouted(req, resp)

    on_put = on_patch = on_delete = on_head = on_options = on_post


class HealthResource(_ProbeResource):
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource(_ProbeResource):
    """Readiness probe reporting deferred dispatches.

    Responds with ``{"status": "ready", "in_flight": <n>}`` where ``n`` is
    the number of dispatches that outlived their response deadline and are
    still running.

    """

    def __init__(
        self,
        coordinator: ResponseCoordinator | None = None,
        *,
        unrouted: UnroutedResponder | None = None,
    ) -> None:
        """Optionally bind the probe to a response coordinator."""
        super().__init__(unrouted=unrouted)
        self._coordinator = coordinator

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status.

        """
        in_flight = self._coordinator.in_flight if self._coordinator else 0
        resp.media = {"status": "ready", "in_flight": in_flight}
        resp.status = HTTPStatus.OK
