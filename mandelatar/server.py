"""Mandelatar -- avatar image server.

Routes:
  GET /api/v1/random        redirect to a fresh random image
  GET /api/v1/img/{token}   render the image described by ``token``
  GET /i1/random, /i1/i/{token}.png
                            short-link aliases of the two above

Any query string (e.g. ``?overlay=profile``) is carried through the random
redirect and read when the image is fetched.

Overlays are read from MANDELATAR_OVERLAY_DIR (default ``assets/``). Until
the profile overlay PNGs exist there, ``?overlay=profile`` answers 500.
``mandelatar serve`` writes any missing ones before starting; with the other
launchers run ``mandelatar overlay`` first.

Launch:
    mandelatar serve
    # or: mandelatar overlay && python -m mandelatar.server
    # or: mandelatar overlay && uvicorn mandelatar.server:app --reload
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from mandelatar.art import compositor
from mandelatar.art.store import DirectoryOverlayStore, OverlayStore
from mandelatar.config import Settings, configure_logging, settings
from mandelatar.errors import EncodingError, PostProcessingError, ValidationError
from mandelatar.fractal.png import create_png
from mandelatar.params.codec import decode_token, encode_token
from mandelatar.params.descriptor import OUTPUT_BOUNDS
from mandelatar.params.post_process import PostProcessConfig
from mandelatar.params.sampler import sample

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def create_app(
    config: Settings | None = None,
    overlay_store: OverlayStore | None = None,
) -> FastAPI:
    config = config or settings
    configure_logging(config.log_level)
    if overlay_store is None:
        overlay_store = DirectoryOverlayStore(config.overlay_dir)

    app = FastAPI(title="Mandelatar", version=VERSION)
    app.state.overlay_store = overlay_store
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
        max_age=86400,
    )

    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(PostProcessingError, _internal_error_handler)
    app.add_exception_handler(EncodingError, _internal_error_handler)

    _register_routes(app)
    return app


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

async def _validation_error_handler(request: Request, exc: ValidationError) -> Response:
    logger.info("rejected %s: %s", request.url.path, exc)
    return PlainTextResponse(str(exc), status_code=400)


async def _internal_error_handler(request: Request, exc: Exception) -> Response:
    logger.error("failed %s: %s", request.url.path, exc)
    return PlainTextResponse("An internal server error occurred", status_code=500)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def random_redirect(request: Request, image_path: str) -> Response:
    token = encode_token(sample(OUTPUT_BOUNDS))
    location = image_path.format(token=token)
    if request.url.query:
        location = f"{location}?{request.url.query}"
    return RedirectResponse(location, status_code=307)


def image_response(request: Request, token: str) -> Response:
    descriptor = decode_token(token)
    # Validate the query before spending time on the render
    pp_config = PostProcessConfig.from_query_params(request.query_params.multi_items())

    png_bytes = create_png(descriptor)

    if pp_config.should_post_process():
        store: OverlayStore = request.app.state.overlay_store
        png_bytes = compositor.apply(pp_config, png_bytes, store.get)

    return Response(content=png_bytes, media_type="image/png")


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health():
        return {"status": "ok", "version": VERSION}

    @app.get("/api/v1/random")
    def get_random_direct(request: Request):
        return random_redirect(request, "/api/v1/img/{token}")

    @app.get("/i1/random")
    def get_random_short(request: Request):
        return random_redirect(request, "/i1/i/{token}.png")

    @app.get("/api/v1/img/{token}")
    def get_image_direct(token: str, request: Request):
        return image_response(request, token)

    @app.get("/i1/i/{token}")
    def get_image_short(token: str, request: Request):
        return image_response(request, token)


app = create_app()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run(host: str | None = None, port: int | None = None) -> None:
    import uvicorn

    host = host or settings.server_addr
    port = port or settings.server_port
    logger.info("Starting server at http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
