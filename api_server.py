from __future__ import annotations  # FastAPI server exposing the interview evaluation pipeline

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import router, upload_router
from config import settings
from services import InterviewServices, build_services
from storage.migrate import migrate


logger = logging.getLogger(__name__)


def _allowed_origins() -> list[str]:
    return [origin.strip() for origin in settings.ALLOWED_ORIGINS.split(",") if origin.strip()]


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # Report malformed bodies as 400
    errors = exc.errors()
    fields = [".".join(str(part) for part in err.get("loc", ()) if part != "body") for err in errors]
    message = "Invalid request: " + ", ".join(field for field in fields if field) if any(fields) else "Invalid request"
    return JSONResponse(status_code=400, content={"detail": message})


def create_app(services: Optional[InterviewServices] = None) -> FastAPI:  # Build the application with wired services
    migrate(settings.DB_PATH)
    wired = services or build_services()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if settings.RESUME_PROCESSING_ON_STARTUP:
            resumed = wired.machine.redispatch_processing()
            if resumed:
                logger.info("Resumed %d in-flight interview evaluations", resumed)
        try:
            yield
        finally:
            wired.close(wait=True)

    app = FastAPI(title="Interview Evaluation API", lifespan=lifespan)
    app.state.services = wired
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(router)
    app.include_router(upload_router)

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok"}

    return app


def main() -> None:  # Run the API with uvicorn
    import uvicorn

    uvicorn.run("api_server:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
