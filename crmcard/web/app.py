"""FastAPI application factory for the vCard import/export API."""

from __future__ import annotations

from fastapi import FastAPI


def create_app() -> FastAPI:
    app = FastAPI(title="CRM vCard")

    from .routes import vcards

    app.include_router(vcards.router, prefix="/vcards")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
