"""Account Service - Employee directory records"""
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..domain.models import ActorContext, EmployeeAccount
from ..domain.enums import AccountStatus
from ..domain.errors import ValidationError
from ..repositories.account_repo import AccountRepository
from ..utils.idgen import generate_account_id
from ..utils.logger import get_logger

logger = get_logger(__name__)


class AccountService:
    """Service for employee account lookups and edits"""

    def __init__(self, account_repo: Optional[AccountRepository] = None):
        self.repo = account_repo or AccountRepository()

    def list_accounts(self, status: Optional[AccountStatus] = None) -> List[EmployeeAccount]:
        return self.repo.list_accounts(status=status)

    def get_account_by_email(self, email: str) -> EmployeeAccount:
        return self.repo.get_account_by_email_or_raise(email)

    def upsert_account(self, data: Dict[str, Any], actor: ActorContext) -> EmployeeAccount:
        """
        Create or replace the account keyed by email

        An existing account keeps its ID and creation time; the rest of its
        fields are replaced by ``data``.
        """
        payload = dict(data)
        existing = self.repo.get_account_by_email(payload["email"]) if payload.get("email") else None
        if existing:
            payload["account_id"] = existing.account_id
            payload["created_at"] = existing.created_at
        else:
            payload.setdefault("account_id", generate_account_id())

        try:
            account = EmployeeAccount.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(
                "Account data is invalid",
                details={"errors": [
                    {"path": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ]}
            )

        account = self.repo.save_account(account)
        logger.info(
            f"{'Updated' if existing else 'Created'} account {account.account_id}",
            extra={"account_email": account.email, "actor_email": actor.email}
        )
        return account
