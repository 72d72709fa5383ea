"""Request dependencies: the caller's owner id and the app's PetService.

Authentication happens in front of this service; whatever sits there is
expected to forward the validated owner id in the X-Owner-Id header.
"""

from fastapi import Header, Request

from odomo import storage
from odomo.pets import PetService


def owner_id(x_owner_id: str = Header(...)) -> str:
    return storage.validate_owner_id(x_owner_id)


def pet_service(request: Request) -> PetService:
    return request.app.state.pets
