"""Step sync endpoint."""

from fastapi import APIRouter, Depends

from odomo.pets import PetService

from .deps import owner_id, pet_service
from .models import SyncStepsBody

router = APIRouter()


@router.post("/sync/steps")
async def sync_steps(
    body: SyncStepsBody,
    owner: str = Depends(owner_id),
    pets: PetService = Depends(pet_service),
):
    """Convert walked steps into XP and Kobans."""
    return pets.sync_steps(owner, body.steps)
