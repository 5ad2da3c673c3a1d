"""Support inquiries API.

``POST /api/inquiries`` is public.  When the request carries a valid bearer
token the inquiry is linked to that member; an invalid token is ignored.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import AuthenticatedPrincipal, get_optional_user
from app.db.engine import get_db
from app.schemas.common import Envelope, ok
from app.schemas.inquiries import InquiryCreate, InquiryOut
from app.services import inquiry_service

router = APIRouter(tags=["inquiries"])


@router.post("", response_model=Envelope[InquiryOut])
async def create_inquiry(
    body: InquiryCreate,
    principal: AuthenticatedPrincipal | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    user_id = principal.user_id if principal is not None else None
    inquiry = await inquiry_service.create_inquiry(db, body, user_id)
    return ok(
        InquiryOut.model_validate(inquiry),
        message="Inquiry received. Our staff will get back to you shortly.",
    )
