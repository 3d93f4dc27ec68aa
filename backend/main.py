"""
Image Harvest API

FastAPI application wiring:
- POST /api/scrape    - discover images on up to 5 pages
- POST /api/download  - bundle selected images into images.zip
- GET  /health        - service health
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from image_bundler import router as bundler_router
from image_scraper import router as scraper_router

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]


def create_app() -> FastAPI:
    app = FastAPI(title="Image Harvest API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )

    app.include_router(scraper_router)
    app.include_router(bundler_router)

    @app.get("/health", include_in_schema=False)
    async def health_check():
        return {"status": "healthy", "service": "image-harvest", "version": app.version}

    return app


logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
