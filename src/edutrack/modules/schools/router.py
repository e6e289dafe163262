"""
Schools Router

Endpoints:
- POST /schools - Register a school (any authenticated user)
- GET /schools - List schools visible to the caller
- GET /schools/{id} - Get a school
- PUT /schools/{id} - Update a school (its admin/principal or super admin)
- DELETE /schools/{id} - Delete a school (super admin)
- POST /schools/{id}/verify - Approve or reject a school (super admin)
- GET /schools/{id}/stats - Dashboard statistics
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.modules.schools import service
from edutrack.modules.schools.models import RegistrationStatus, SchoolType
from edutrack.modules.schools.schemas import (
    SchoolCreate,
    SchoolRegistrationResponse,
    SchoolResponse,
    SchoolStats,
    SchoolUpdate,
    SchoolVerifyRequest,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()


@router.post(
    "",
    response_model=SchoolRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register School",
    description="""
Register a new school. The school starts in `PENDING` state until a super
admin verifies it.

**Admin selection (`admin`):**
- `{"type": "existing", "user_id": ...}` links an existing user
- `{"type": "new", "email": ..., "first_name": ..., "last_name": ...}` creates one
- omitted: the caller becomes the school admin (not allowed for super admins)
""",
    responses={
        400: {"description": "Validation error or missing admin"},
        409: {"description": "Duplicate school or admin email"},
    },
)
async def register_school(
    body: SchoolCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    school, admin = await service.register_school(db, actor, body)
    return {
        "message": "School registered successfully. Awaiting verification.",
        "item": school,
        "admin_user_id": admin.id,
    }


@router.get("", response_model=ListResponse[SchoolResponse])
async def list_schools(
    registration_status: RegistrationStatus | None = Query(None),
    school_type: SchoolType | None = Query(None),
    search: str | None = Query(None, max_length=100),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_schools(
        db,
        actor,
        params,
        registration_status=registration_status,
        school_type=school_type,
        search=search,
    )
    return {
        "message": "Schools retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.get("/{school_id}", response_model=ItemResponse[SchoolResponse])
async def get_school(
    school_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    school = await service.get_school(db, actor, school_id)
    return {"message": "School retrieved successfully", "item": school}


@router.put("/{school_id}", response_model=ItemResponse[SchoolResponse])
async def update_school(
    school_id: str,
    body: SchoolUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    school = await service.update_school(db, actor, school_id, body)
    return {"message": "School updated successfully", "item": school}


@router.delete("/{school_id}", response_model=MessageResponse)
async def delete_school(
    school_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_school(db, actor, school_id)
    return {"message": "School deleted successfully"}


@router.post(
    "/{school_id}/verify",
    response_model=ItemResponse[SchoolResponse],
    summary="Verify School",
    description="Approve or reject a pending school. **Access:** super admin only.",
)
async def verify_school(
    school_id: str,
    body: SchoolVerifyRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    school = await service.verify_school(db, actor, school_id, body)
    return {"message": f"School {body.status.lower()} successfully", "item": school}


@router.get("/{school_id}/stats", response_model=ItemResponse[SchoolStats])
async def school_stats(
    school_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    stats = await service.get_school_stats(db, actor, school_id)
    return {"message": "School statistics retrieved successfully", "item": stats}
