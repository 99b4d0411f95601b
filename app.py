"""FastAPI application."""

import argparse
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from configs import settings
from pricecompare.controllers.search_controllers import search_router
from pricecompare.logger_config import get_logger

logger = get_logger("pricecompare")
get_logger("price_search")
get_logger("search_history")

logger.info("Starting FastAPI application...")
app = FastAPI(
    title="Live Price Compare API",
    description="Live product prices scraped from Amazon, Flipkart and Croma.",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(search_router)


@app.get("/", response_description="Api healthcheck")  # type: ignore[misc]
async def index() -> Dict[str, str]:
    """Define a route for handling HTTP GET requests to the root URL ("/")."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default=settings.HOST, help="Application host.")
    parser.add_argument(
        "--port", default=settings.PORT, type=int, help="Application port."
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development purposes.",
    )
    args = parser.parse_args()

    uvicorn.run("app:app", host=args.host, port=args.port, reload=args.reload)
