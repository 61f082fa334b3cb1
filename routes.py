# routes.py
from fastapi import FastAPI
from controller.asset_controller import asset_router
from controller.document_controller import document_router
from controller.subscription_controller import subscription_router


def register_routes(app: FastAPI) -> None:
    """Register & Access control controllers here."""
    app.include_router(subscription_router)
    app.include_router(document_router)
    app.include_router(asset_router)
