"""Health check, settings and item catalogue endpoints."""

from fastapi import APIRouter, Depends
from pydantic import ValidationError

from odomo import storage
from odomo.engine import Tuning, list_catalogue
from odomo.errors import InvalidRequest
from odomo.pets import PetService

from .deps import pet_service

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/items")
async def list_items(pets: PetService = Depends(pet_service)):
    """Item catalogue with prices and effects."""
    return list_catalogue(pets.tuning.catalogue)


@router.get("/settings")
async def get_settings():
    """Get stored app settings (starting balance, tuning overrides)."""
    return storage.get_config()


@router.patch("/settings")
async def update_settings(body: dict):
    """Update stored app settings (partial merge). Tuning applies on next start."""
    balance = body.get("starting_balance")
    if balance is not None and (not isinstance(balance, int) or isinstance(balance, bool) or balance < 0):
        raise InvalidRequest("starting_balance must be a non-negative integer")
    if isinstance(body.get("tuning"), dict):
        merged = dict(storage.get_config()["tuning"])
        for key, value in body["tuning"].items():
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = value
        try:
            Tuning.from_overrides(merged)
        except ValidationError as e:
            raise InvalidRequest(f"Invalid tuning: {e.errors()[0]['msg']}")
    return storage.update_config(body)
