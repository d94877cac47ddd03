"""FastAPI application setup for Weathercraft Guardian."""

from fastapi import FastAPI

from .api import router as api_router

app = FastAPI(title="Weathercraft Guardian")

# API routes
app.include_router(api_router, prefix="/v1")
