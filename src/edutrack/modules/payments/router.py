"""
Payments Router

Endpoints:
- GET /payments/account - The school's settlement account
- POST /payments/account - Configure (or replace) the settlement account
- PUT /payments/account/status - Activate or deactivate it
- GET /payments/banks - Banks supported by Paystack
- GET /payments/statistics - Payment and settlement totals
- GET /payments/transfers - Settlement transfer history
- POST /payments/webhook - Paystack webhook (unauthenticated, signed)
"""

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta, single_page_meta
from edutrack.modules.payments import service
from edutrack.modules.payments.schemas import (
    Bank,
    PaymentAccountConfigure,
    PaymentAccountResponse,
    PaymentAccountStatusUpdate,
    PaymentResponse,
    PaymentStatisticsResponse,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()


@router.get("/account", response_model=ItemResponse[PaymentAccountResponse])
async def get_account(
    school_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    account = await service.get_account(db, actor, school_id)
    return {"message": "Payment account retrieved successfully", "item": account}


@router.post("/account", response_model=ItemResponse[PaymentAccountResponse])
async def configure_account(
    body: PaymentAccountConfigure,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    account = await service.configure_account(db, actor, body)
    return {"message": "Payment account configured successfully", "item": account}


@router.put("/account/status", response_model=ItemResponse[PaymentAccountResponse])
async def set_account_status(
    body: PaymentAccountStatusUpdate,
    school_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    account = await service.set_account_active(db, actor, body.is_active, school_id)
    state = "activated" if body.is_active else "deactivated"
    return {"message": f"Payment account {state} successfully", "item": account}


@router.get("/banks", response_model=ListResponse[Bank])
async def list_banks(actor: Actor = Depends(get_current_actor)):
    banks = await service.list_banks(actor)
    return {
        "message": "Banks retrieved successfully",
        "items": banks,
        "pagination": single_page_meta(len(banks)),
    }


@router.get("/statistics", response_model=PaymentStatisticsResponse)
async def get_statistics(
    school_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    stats = await service.get_statistics(db, actor, school_id)
    return {"message": "Payment statistics retrieved successfully", "item": stats}


@router.get("/transfers", response_model=ListResponse[PaymentResponse])
async def transfer_history(
    school_id: str | None = Query(None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.transfer_history(db, actor, params, school_id)
    return {
        "message": "Transfer history retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.post("/webhook", response_model=MessageResponse, include_in_schema=False)
async def paystack_webhook(
    request: Request,
    x_paystack_signature: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
):
    body = await request.body()
    event = await service.handle_webhook(db, body, x_paystack_signature)
    return {"message": f"Webhook {event or 'event'} processed"}
