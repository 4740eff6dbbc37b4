import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Header, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .config import GuestbookSettings
from .db import build_engine, build_session_factory
from .errors import GuestbookError, StorageError
from .notify import NotificationDispatcher, Notifier, WebhookNotifier
from .schemas import BlockedIPsOut, DrawingMetadataOut
from .storage import BlobStorage, SqlBlobStorage
from .store import DrawingLogStore, describe_deletion

logger = logging.getLogger(__name__)

_STORAGE_FAILURE_MESSAGES = {
    "GET": "Error retrieving drawings",
    "POST": "Error saving drawing",
    "DELETE": "Error deleting drawing.",
}


def build_storage(settings: GuestbookSettings) -> SqlBlobStorage:
    engine = build_engine(settings.database_url)
    return SqlBlobStorage(build_session_factory(engine))


def create_app(
    settings: Optional[GuestbookSettings] = None,
    storage: Optional[BlobStorage] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    settings = settings or GuestbookSettings()
    owns_storage = storage is None
    if owns_storage:
        storage = build_storage(settings)
    if notifier is None and settings.webhook_url:
        notifier = WebhookNotifier(
            settings.webhook_url, timeout_seconds=settings.webhook_timeout_seconds
        )
    dispatcher = NotificationDispatcher(notifier)
    store = DrawingLogStore(storage, secret_key=settings.secret_key, dispatcher=dispatcher)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if isinstance(storage, SqlBlobStorage):
            await asyncio.to_thread(storage.create_schema)
        if not settings.secret_key:
            logger.warning("no secret key configured, deletes will be refused")
        yield
        await dispatcher.aclose()
        if owns_storage:
            storage.dispose()

    app = FastAPI(title="Guestbook Drawing API", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GuestbookError)
    async def guestbook_error(request: Request, exc: GuestbookError):
        if isinstance(exc, StorageError):
            logger.error(
                "storage failure during %s %s", request.method, request.url.path, exc_info=exc
            )
            message = _STORAGE_FAILURE_MESSAGES.get(request.method, exc.message)
            return PlainTextResponse(message, status_code=exc.status_code)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.error("unhandled error during %s %s", request.method, request.url.path, exc_info=exc)
        return PlainTextResponse("Internal server error", status_code=500)

    prefix = settings.api_prefix

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get(prefix)
    async def list_drawings():
        content = await store.list_drawings()
        return Response(
            content=content,
            media_type="application/octet-stream",
            headers={"Access-Control-Allow-Origin": "*"},
        )

    @app.post(prefix, response_class=PlainTextResponse)
    async def create_drawing(request: Request):
        body = await request.body()
        await store.append_drawing(body, request.headers)
        return "Drawing received"

    @app.delete(prefix, response_class=PlainTextResponse)
    async def delete_drawing(
        secret_key: Optional[str] = Header(default=None),
        drawing_index: Optional[str] = Header(default=None),
        block_ip: Optional[str] = Header(default=None),
    ):
        result = await store.delete_drawing(
            secret_key, drawing_index, block_ip=block_ip == "true"
        )
        return describe_deletion(result)

    @app.get(prefix + "/metadata", response_model=List[DrawingMetadataOut])
    async def list_metadata(secret_key: Optional[str] = Header(default=None)):
        store.authorize(secret_key)
        entries = await store.list_metadata()
        return [DrawingMetadataOut(index=i, **e.model_dump()) for i, e in enumerate(entries)]

    @app.get(prefix + "/blocked", response_model=BlockedIPsOut)
    async def list_blocked(secret_key: Optional[str] = Header(default=None)):
        store.authorize(secret_key)
        return BlockedIPsOut(ips=await store.block_list.blocked_ips())

    return app


app = create_app()
