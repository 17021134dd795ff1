from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    load_dotenv("local.env")

    from endpoints.datum_endpoints import KEYID_HEADER, TOKEN_HEADER, router as datum_router
    from settings import get_settings

    settings = get_settings()

    app = FastAPI(title="datum")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[KEYID_HEADER],
    )

    @app.get("/.well-known/datum")
    async def service_metadata():
        return JSONResponse(
            {
                "token_header": TOKEN_HEADER,
                "encryption_keyid_header": KEYID_HEADER,
                "formats": ["raw", "json", "toml"],
            }
        )

    # Catch-all token routes go last.
    app.include_router(datum_router)

    logger.debug("datum app created")
    return app


app = create_app()
