"""Restaurant routes gated by the access guard.

Learn: three guard flavours side by side:
- GET /restaurants/current → admin+, the caller's own restaurant
- GET /restaurants/{id} → admin+ of that restaurant, or any super admin
- GET /admin/restaurants → super admins only, every tenant
"""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from maitre.auth.dependencies import (
    get_user_repository,
    require_admin,
    require_restaurant_admin,
    require_super_admin,
)
from maitre.auth.identity import CurrentIdentity
from maitre.db.repository import UserRepository

router = APIRouter()


class RestaurantRead(BaseModel):
    id: uuid.UUID
    name: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


@router.get("/restaurants/current", response_model=RestaurantRead)
async def get_current_restaurant(identity: CurrentIdentity = Depends(require_admin)):
    return identity.user.restaurant


@router.get("/restaurants/{restaurant_id}", response_model=RestaurantRead)
async def get_restaurant(
    restaurant_id: uuid.UUID,
    identity: CurrentIdentity = Depends(require_restaurant_admin),
    repository: UserRepository = Depends(get_user_repository),
):
    restaurant = await repository.find_restaurant(restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


@router.get("/admin/restaurants", response_model=list[RestaurantRead])
async def list_restaurants(
    identity: CurrentIdentity = Depends(require_super_admin),
    repository: UserRepository = Depends(get_user_repository),
):
    return await repository.list_restaurants()
