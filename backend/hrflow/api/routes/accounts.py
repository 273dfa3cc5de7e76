"""Account API Routes - Employee directory"""
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..deps import get_actor_dep, get_correlation_id_dep, get_account_service
from ...domain.models import ActorContext
from ...domain.enums import AccountStatus
from ...services.account_service import AccountService

router = APIRouter()


class AccountListResponse(BaseModel):
    items: List[Dict[str, Any]]
    total: int


@router.get("", response_model=AccountListResponse)
async def list_accounts(
    status: Optional[AccountStatus] = Query(None),
    service: AccountService = Depends(get_account_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    accounts = service.list_accounts(status=status)
    return AccountListResponse(
        items=[a.model_dump(mode="json") for a in accounts],
        total=len(accounts)
    )


@router.get("/{email}")
async def get_account(
    email: str,
    service: AccountService = Depends(get_account_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    return service.get_account_by_email(email).model_dump(mode="json")


@router.put("")
async def upsert_account(
    payload: Dict[str, Any],
    actor: ActorContext = Depends(get_actor_dep),
    service: AccountService = Depends(get_account_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """Create the account for an email, or replace the existing one"""
    return service.upsert_account(payload, actor).model_dump(mode="json")
