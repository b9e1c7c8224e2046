from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse

from . import config, schemas
from .dependencies import Identity, ServicesDep, build_services
from .errors import FileHostError, InternalError, NotFound
from .models import utcnow

log = logging.getLogger("filehost")


def create_app(settings: Optional[config.Settings] = None) -> FastAPI:
    settings = settings or config.get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services = build_services(settings)
        if services.db is not None:
            await services.db.create_all()
        else:
            log.warning("USE_DATABASE is off: keys and records are kept in memory only")
            if settings.DEV_API_KEY:
                await services.keys.create("dev", settings.DEV_API_KEY, utcnow() + timedelta(days=365))
        await services.blobs.ensure_root()
        app.state.services = services
        log.info("Serving uploads from %s", services.blobs.root)
        try:
            yield
        finally:
            await services.close()

    app = FastAPI(title=settings.APP_NAME, version=settings.VERSION, lifespan=lifespan)

    @app.exception_handler(FileHostError)
    async def file_host_error_handler(request: Request, exc: FileHostError):
        if isinstance(exc, InternalError):
            log.error("%s %s failed: %s", request.method, request.url.path, exc.detail, exc_info=exc.cause)
            return PlainTextResponse("Internal server error", status_code=exc.status_code)
        return PlainTextResponse(exc.detail, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log.error("Unhandled error: %s", exc, exc_info=True)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        return "Hello, World!"

    @app.get("/health", response_model=schemas.HealthStatus)
    async def health() -> schemas.HealthStatus:
        return schemas.HealthStatus(status="ok", service=settings.APP_NAME, version=settings.VERSION)

    @app.post("/upload", response_model=schemas.FileUpload, tags=["Files"])
    async def upload(
        request: Request,
        identity: Identity,
        services: ServicesDep,
        name: Optional[str] = Query(None, description="Display name to keep with the file"),
    ) -> schemas.FileUpload:
        """
        Uploads the raw request body.

        **Only accepts images.**
        """
        record = await services.file_store.ingest(identity, request.stream(), declared_name=name)
        return schemas.FileUpload(
            id=record.id,
            ext=record.extension,
            url=f"{settings.PUBLIC_BASE_URL.rstrip('/')}/get?id={record.id}",
        )

    @app.get("/get", tags=["Files"])
    async def get_file(services: ServicesDep, file_id: Optional[str] = Query(None, alias="id")) -> StreamingResponse:
        """Gets file by id"""
        if not file_id:
            raise NotFound()
        retrieved = await services.retrieval.retrieve(file_id)
        return StreamingResponse(
            retrieved.stream,
            media_type=retrieved.media_type,
            headers={"Content-Length": str(retrieved.record.size_bytes)},
        )

    return app


app = create_app()
