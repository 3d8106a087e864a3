"""
Point d'entrée principal de l'API AI vs Real.
Démarrage : uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import init_db
from app.exceptions import ContestError
from app.routers import classrooms, contests, participation

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : crée les tables manquantes en développement."""
    if settings.CREATE_TABLES_ON_STARTUP:
        init_db()
        logger.info("Tables vérifiées (%s)", settings.ENV)
    yield


app = FastAPI(
    title="AI vs Real API",
    description="Concours en classe : images générées par IA ou photos réelles ?",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# allow_origin_regex est nécessaire pour les requêtes preflight POST (JSON et multipart).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "X-Session-ID"],
)


app.include_router(classrooms.router)
app.include_router(contests.router)
app.include_router(participation.router)


@app.exception_handler(ContestError)
async def contest_error_handler(request: Request, exc: ContestError) -> JSONResponse:
    """Rend une erreur métier : message lisible + code stable."""
    if exc.status_code >= 500:
        logger.error("%s %s : %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors()), "code": "VALIDATION_ERROR"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    Sans ce handler, ServerErrorMiddleware renvoie une réponse brute sans headers CORS,
    ce qui provoque une erreur "Failed to fetch" côté navigateur.
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue.", "code": "INTERNAL_ERROR"},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "AI vs Real API", "version": "0.1.0"}
