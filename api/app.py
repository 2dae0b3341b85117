# -*- coding: utf-8 -*-
"""
transitopt FastAPI Application
"""
import os
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import registry
from api.routers import analyze, calibrate

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    registry.load()
    logger.info("Engine loaded with params: %s", asdict(registry.get_engine().params))
    yield


app = FastAPI(title="transitopt", version=VERSION, lifespan=lifespan)


allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:8000,http://127.0.0.1:8000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=500)

app.include_router(analyze.router, prefix="/api", tags=["analyze"])
app.include_router(calibrate.router, prefix="/api", tags=["calibrate"])


@app.get(
    "/health",
    summary="서비스 상태 확인",
    description="엔진 로드 여부와 현재 판정 파라미터를 반환합니다.",
    response_description="status(healthy/unavailable), version, params",
)
async def health():
    try:
        engine = registry.get_engine()
        return {
            "status": "healthy",
            "version": VERSION,
            "params": asdict(engine.params),
        }
    except RuntimeError:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "detail": "Engine not loaded"},
        )


@app.get(
    "/",
    summary="API 안내",
    description="서비스 이름, 버전, 문서 경로를 반환합니다.",
)
async def index():
    return {"name": "transitopt", "version": VERSION, "docs": "/docs"}
