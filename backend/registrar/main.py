"""FastAPI application entry point."""
from __future__ import annotations
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from registrar.api import courses, departments
from registrar.persistence.db import init_db


# ------------------------------------------------------------------
# Startup: initialise DB schema
# ------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# ------------------------------------------------------------------
# App creation
# ------------------------------------------------------------------
app = FastAPI(
    title="Registrar API",
    description="Department records with optimistic concurrency control",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS — allow everything for local dev (restrict for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------------------------------------------------
# Routers
# ------------------------------------------------------------------
app.include_router(departments.router)
app.include_router(courses.router)
