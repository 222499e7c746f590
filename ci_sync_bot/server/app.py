"""FastAPI application receiving GitHub webhooks and serving the bot status."""

import asyncio
import contextlib
from collections.abc import AsyncIterator

import structlog
from fastapi import APIRouter, FastAPI, Header, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse

from ci_sync_bot.engine import ReconciliationEngine
from ci_sync_bot.events.exceptions import EventDecodeError
from ci_sync_bot.utils.constants import DEFAULT_RESYNC_INTERVAL

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def create_router(engine: ReconciliationEngine) -> APIRouter:
    """Create the routes of the bot."""
    router = APIRouter()

    @router.get("/status")
    async def get_status() -> JSONResponse:
        """Get the synchronization status and the prospective fix version of every branch."""
        bot_status = await engine.get_status()
        return JSONResponse(bot_status.model_dump(by_alias=True, exclude_none=True, mode="json"))

    @router.post("/")
    async def receive_webhook(request: Request, x_github_event: str = Header(default="")) -> Response:
        """Handle a GitHub webhook delivery."""
        body = await request.body()
        if not body:
            return PlainTextResponse("empty payload", status_code=status.HTTP_501_NOT_IMPLEMENTED)
        try:
            await engine.dispatch(x_github_event, body)
        except EventDecodeError as exc:
            logger.warning("Failed to decode event", event_type=x_github_event, error=str(exc))
            return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)
        except Exception as exc:
            logger.exception("Failed to handle event", event_type=x_github_event, error=str(exc))
            return PlainTextResponse(str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


def create_app(engine: ReconciliationEngine, resync_interval: float | None = DEFAULT_RESYNC_INTERVAL) -> FastAPI:
    """Create the application.

    Args:
        engine: Engine handling the deliveries
        resync_interval: Seconds between two periodic reconciliation passes; None disables them
    """

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        task: asyncio.Task[None] | None = None
        if resync_interval is not None:
            task = asyncio.create_task(engine.run_periodic_reconciliation(resync_interval))
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            await engine.aclose()

    app = FastAPI(title="ci-sync-bot", lifespan=lifespan)
    app.include_router(create_router(engine))
    return app
