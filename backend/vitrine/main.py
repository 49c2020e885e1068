"""Vitrine API - Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from vitrine import __version__
from vitrine.api import scraping
from vitrine.config import get_settings
from vitrine.jobs.queue import ScrapeQueue

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    queue = ScrapeQueue(
        concurrency=settings.scrape_concurrency,
        max_pending=settings.scrape_max_pending,
    )
    app.state.queue = queue
    logger.info("Scrape queue started (concurrency=%d)", queue.concurrency)
    yield
    await queue.drain()
    app.state.queue = None


app = FastAPI(
    title=settings.app_name,
    description="Extrai título, preço e imagem de páginas de produto e resultados de busca",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(scraping.router, prefix="/api/v1")


@app.get("/health")
async def health(request: Request):
    queue = getattr(request.app.state, "queue", None)
    return {
        "status": "ok",
        "active": queue.active if queue else 0,
        "pending": queue.pending if queue else 0,
    }


def run() -> None:
    """Console entry point."""
    uvicorn.run(app, host=settings.host, port=settings.port)
