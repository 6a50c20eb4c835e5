"""API router registration."""

from fastapi import APIRouter

from . import assets, packages

router = APIRouter(prefix="/api")

router.include_router(assets.router)
router.include_router(packages.router)
