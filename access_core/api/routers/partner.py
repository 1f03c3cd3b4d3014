"""Partner API connectivity endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from access_core.api.dependencies import get_partner_token, get_partner_token_provider
from access_core.api.guards import require_permission
from access_core.services.partner_token import PartnerTokenProvider

router = APIRouter(dependencies=[Depends(require_permission("settings.system"))])


@router.get("/status")
def partner_status(
    provider: Optional[PartnerTokenProvider] = Depends(get_partner_token_provider),
    token: Optional[str] = Depends(get_partner_token),
) -> dict[str, bool]:
    return {"configured": provider is not None, "authenticated": token is not None}
