"""Account and inventory endpoints."""

from fastapi import APIRouter, Depends

from odomo.pets import PetService

from .deps import owner_id, pet_service
from .models import BuyItemBody, UseItemBody

router = APIRouter()


@router.post("/account", status_code=201)
async def open_account(owner: str = Depends(owner_id), pets: PetService = Depends(pet_service)):
    """Open a Koban account for the caller with the configured starting balance."""
    return pets.open_account(owner)


@router.get("/account")
async def get_account(owner: str = Depends(owner_id), pets: PetService = Depends(pet_service)):
    """Balance and inventory of the caller."""
    return pets.get_account(owner)


@router.get("/inventory")
async def get_inventory(owner: str = Depends(owner_id), pets: PetService = Depends(pet_service)):
    """Items held by the caller, ordered by item type."""
    return pets.get_inventory(owner)


@router.post("/inventory/buy")
async def buy_item(
    body: BuyItemBody,
    owner: str = Depends(owner_id),
    pets: PetService = Depends(pet_service),
):
    """Spend Kobans on items."""
    return {"success": True, **pets.buy_item(owner, body.item_type, body.quantity)}


@router.post("/inventory/use")
async def use_item(
    body: UseItemBody,
    owner: str = Depends(owner_id),
    pets: PetService = Depends(pet_service),
):
    """Use one item on the caller's Odomo."""
    return {"success": True, **pets.use_item(owner, body.item_type)}
