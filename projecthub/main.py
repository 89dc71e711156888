# ---------------------------------------------------------
# projecthub/main.py
# ProjectHub - project membership & reporting backend
#
# Run: uvicorn projecthub.main:app --reload (from repo root)
#
# - FastAPI + SQLite
# - /auth/*        : register / login (JWT bearer tokens)
# - /me            : caller profile, user search
# - /projects/*    : project lifecycle, membership, reports
# ---------------------------------------------------------

from __future__ import annotations

from typing import Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from projecthub.config import CORS_ORIGINS, IS_DEV, IS_PROD
from projecthub.db import init_db
from projecthub.errors import ProjectHubError
from projecthub.routes_auth import router as auth_router
from projecthub.routes_projects import router as projects_router

# ---------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------
app = FastAPI(title="ProjectHub Backend", version="0.1")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if IS_PROD else ["*"],  # Restrict origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

init_db()


@app.exception_handler(ProjectHubError)
def handle_project_error(request: Request, exc: ProjectHubError) -> JSONResponse:
    if IS_DEV:
        print(f"[ERROR] {request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(projects_router)
