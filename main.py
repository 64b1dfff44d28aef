import os
import traceback

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings
from dependencies import build_stores
from routes import itineraries, library
from utils.logger import setup_api_logger


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title=settings.app_name, description="Itineraries, library items and printable itineraries")

    # setup file logger for API failures
    api_logger = setup_api_logger(settings.log_path, settings.log_level)

    # one pair of stores per process, shared by every request
    app.state.settings = settings
    app.state.itinerary_store, app.state.library_store = build_stores(settings)
    api_logger.info("Using %s store backend", settings.store_backend)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    async def _body(request: Request) -> str:
        try:
            body = await request.body()
        except Exception:
            body = b""
        return body.decode('utf-8', errors='replace')

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        # log request info and stacktrace
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        api_logger.error("Unhandled exception on %s %s | body=%s | error=%s\n%s",
                         request.method, request.url.path, await _body(request), str(exc), tb)
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        api_logger.warning("HTTPException on %s %s | status=%s | body=%s | detail=%s",
                           request.method, request.url.path, exc.status_code,
                           await _body(request), str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        api_logger.warning("Invalid request on %s %s | body=%s | errors=%s",
                           request.method, request.url.path, await _body(request), errors)
        return JSONResponse(status_code=400, content={"detail": errors})

    @app.get("/health")
    def health():
        return {"status": "healthy", "store_backend": settings.store_backend}

    app.include_router(itineraries.router)
    app.include_router(library.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
