"""Odomo endpoints: birth, live stats, care, experience, deletion."""

from fastapi import APIRouter, Depends

from odomo.pets import PetService

from .deps import owner_id, pet_service
from .models import AddXpBody, CreatePet, InteractBody

router = APIRouter()


@router.post("/pet", status_code=201)
async def create_pet(
    body: CreatePet | None = None,
    owner: str = Depends(owner_id),
    pets: PetService = Depends(pet_service),
):
    """Hatch a new Odomo for the caller."""
    return pets.create(owner, body.name if body else None)


@router.get("/pet")
async def get_pet(owner: str = Depends(owner_id), pets: PetService = Depends(pet_service)):
    """Live stats, decayed to the current time."""
    return pets.get_live_stats(owner)


@router.post("/pet/interact")
async def interact(
    body: InteractBody,
    owner: str = Depends(owner_id),
    pets: PetService = Depends(pet_service),
):
    """Feed, clean or heal."""
    return pets.interact(owner, body.type, body.amount)


@router.post("/pet/xp")
async def add_xp(
    body: AddXpBody,
    owner: str = Depends(owner_id),
    pets: PetService = Depends(pet_service),
):
    """Grant experience directly."""
    return pets.add_experience(owner, body.amount)


@router.delete("/pet")
async def delete_pet(owner: str = Depends(owner_id), pets: PetService = Depends(pet_service)):
    """Delete the caller's Odomo. Account and inventory are kept."""
    pets.delete(owner)
    return {"ok": True}
