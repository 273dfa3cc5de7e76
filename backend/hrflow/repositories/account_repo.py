"""Account Repository - Employee directory records"""
import re
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo import ASCENDING

from .mongo_client import get_collection, ACCOUNTS
from ..domain.models import EmployeeAccount
from ..domain.enums import AccountStatus
from ..domain.errors import AccountNotFoundError, AlreadyExistsError
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)


class AccountRepository:
    """Repository for employee accounts, keyed by account_id and unique by email"""

    def __init__(self, collection: Optional[Collection] = None):
        self._accounts: Collection = collection if collection is not None else get_collection(ACCOUNTS)

    @staticmethod
    def _email_query(email: str) -> Dict[str, Any]:
        # Emails are matched case-insensitively
        return {"email": {"$regex": f"^{re.escape(email.strip())}$", "$options": "i"}}

    def list_accounts(self, status: Optional[AccountStatus] = None) -> List[EmployeeAccount]:
        """List all accounts, optionally filtered by status"""
        query: Dict[str, Any] = {}
        if status:
            query["status"] = status.value
        accounts = []
        for doc in self._accounts.find(query).sort("name", ASCENDING):
            doc.pop("_id", None)
            accounts.append(EmployeeAccount.model_validate(doc))
        return accounts

    def get_account(self, account_id: str) -> Optional[EmployeeAccount]:
        doc = self._accounts.find_one({"account_id": account_id})
        if not doc:
            return None
        doc.pop("_id", None)
        return EmployeeAccount.model_validate(doc)

    def get_account_by_email(self, email: str) -> Optional[EmployeeAccount]:
        """Find the single account for an email, if any"""
        if not email:
            return None
        doc = self._accounts.find_one(self._email_query(email))
        if not doc:
            return None
        doc.pop("_id", None)
        return EmployeeAccount.model_validate(doc)

    def get_account_by_email_or_raise(self, email: str) -> EmployeeAccount:
        account = self.get_account_by_email(email)
        if not account:
            raise AccountNotFoundError(f"No employee account for {email}")
        return account

    def save_account(self, account: EmployeeAccount) -> EmployeeAccount:
        """
        Insert or replace an account

        Raises:
            AlreadyExistsError: If a different account already uses the email
        """
        clash = self._accounts.find_one(self._email_query(account.email), {"account_id": 1})
        if clash and clash.get("account_id") != account.account_id:
            raise AlreadyExistsError(
                f"An account for {account.email} already exists",
                details={"account_id": clash.get("account_id")}
            )

        now = utc_now()
        account.updated_at = now
        if account.created_at is None:
            account.created_at = now

        doc = account.model_dump(mode="json")
        doc["_id"] = account.account_id
        self._accounts.replace_one({"account_id": account.account_id}, doc, upsert=True)
        logger.info(
            f"Saved employee account {account.account_id}",
            extra={"account_email": account.email, "status": account.status.value}
        )
        return account
