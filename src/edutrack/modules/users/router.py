"""
Users Router

Endpoints:
- POST /users/staff - Create a principal or school admin account
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.modules.shared.schemas import ItemResponse
from edutrack.modules.users import service
from edutrack.modules.users.schemas import StaffUserCreate, UserResponse

router = APIRouter()


@router.post(
    "/staff",
    response_model=ItemResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Email already registered"}},
)
async def create_staff_user(
    body: StaffUserCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    user = await service.create_staff_user(db, actor, body)
    return {"message": "User created successfully", "item": user}
