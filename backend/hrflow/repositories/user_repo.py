"""User Repository - Staff directory used for assignees and supervisors"""
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo import ASCENDING

from .mongo_client import get_collection, USERS
from ..domain.models import UserRef
from ..domain.enums import Department
from ..domain.errors import UserNotFoundError

from ..utils.logger import get_logger

logger = get_logger(__name__)


class UserRepository:
    """Repository for staff users"""

    def __init__(self, collection: Optional[Collection] = None):
        self._users: Collection = collection if collection is not None else get_collection(USERS)

    def get_user(self, user_id: str) -> Optional[UserRef]:
        doc = self._users.find_one({"user_id": user_id})
        if not doc:
            return None
        doc.pop("_id", None)
        return UserRef.model_validate(doc)

    def get_user_or_raise(self, user_id: str) -> UserRef:
        user = self.get_user(user_id)
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    def list_users(self, department: Optional[Department] = None) -> List[UserRef]:
        query: Dict[str, Any] = {}
        if department:
            query["department"] = department.value
        users = []
        for doc in self._users.find(query).sort("name", ASCENDING):
            doc.pop("_id", None)
            users.append(UserRef.model_validate(doc))
        return users

    def save_user(self, user: UserRef) -> UserRef:
        doc = user.model_dump(mode="json")
        doc["_id"] = user.user_id
        self._users.replace_one({"user_id": user.user_id}, doc, upsert=True)
        logger.info(f"Saved user {user.user_id}")
        return user
