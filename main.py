"""Recitation coach – FastAPI application entry point."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from reciter.config import settings

# --- Configure logging so reciter.* loggers are visible alongside uvicorn ---
logging.basicConfig(
    level=settings.log_level,
    format="%(levelname)s:    %(name)s - %(message)s",
    stream=sys.stdout,
    force=True,  # override uvicorn's config
)

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    log.info(
        "Matcher threshold %.2f, locale %r (normalization %s), batch tokenizer %r",
        settings.similarity_threshold,
        settings.locale,
        "on" if settings.use_locale_normalization else "off",
        settings.batch_tokenizer,
    )
    yield
    log.info("Shutting down")


app = FastAPI(title="Recitation Coach", version="0.1.0", lifespan=lifespan)


@app.get("/health")
async def health():
    return {"status": "ok"}


# --- Register routers ---
from reciter.routes.alignment import router as alignment_router  # noqa: E402
from reciter.routes.recitation import router as recitation_router  # noqa: E402

app.include_router(alignment_router, prefix="/api")
app.include_router(recitation_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
