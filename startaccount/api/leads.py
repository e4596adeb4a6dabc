"""
Purchase request endpoint.

The customer's contact details are relayed to the operator chat and a
pending order is recorded. If the relay fails no order is recorded and
the customer is asked to retry.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from startaccount.db.database import get_session
from startaccount.models.order import ContactMethod, OrderStatus
from startaccount.services.lead_relay import LeadRequest, submit_lead

router = APIRouter(prefix="/leads", tags=["leads"])


class LeadSubmitRequest(BaseModel):
    """Purchase form contents. Completeness is checked by the relay."""

    account_id: str = Field(..., min_length=1)
    contact_method: str | None = Field(
        default=None,
        description="One of: " + ", ".join(method.value for method in ContactMethod),
    )
    contact_value: str | None = None
    consent: bool = False


class OrderResponse(BaseModel):
    id: int | None
    account_id: str
    price: float
    contact_method: ContactMethod
    status: OrderStatus
    created_at: datetime | None = None


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    request: LeadSubmitRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> OrderResponse:
    """
    Submit a purchase request for an account.

    Returns 422 for an incomplete form, 404 for an unknown or sold account,
    503 when the operator channel is not configured and 502 when the
    message could not be delivered.
    """
    order = await submit_lead(
        session,
        LeadRequest(
            account_id=request.account_id,
            contact_method=request.contact_method,
            contact_value=request.contact_value,
            consent=request.consent,
        ),
    )
    return OrderResponse(
        id=order.id,
        account_id=order.account_id,
        price=order.price,
        contact_method=order.contact_method,
        status=order.status,
        created_at=order.created_at,
    )
