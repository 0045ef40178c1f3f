# main.py
"""
Point d'entrée de l'API de scoring.
Enregistre les modules via leurs routers.

Architecture : modules verticaux (repository / service / router) + engine pur.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings

from app.modules.scoring.router import router as scoring_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(scoring_router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "1.0.0"}
