"""Workflow Repository - Whole-aggregate storage for workflow instances"""
from typing import Any, Callable, Dict, List, Optional
from pymongo.collection import Collection
from pymongo import DESCENDING
from pydantic import ValidationError

from .mongo_client import get_collection, WORKFLOWS
from ..domain.models import Workflow
from ..domain.enums import WorkflowStatus, WorkflowType
from ..domain.errors import WorkflowNotFoundError, ConcurrencyError
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)

WorkflowListener = Callable[[str], None]


class WorkflowRepository:
    """
    Repository for workflow instances

    Workflows are loaded and saved as whole documents. Saves are guarded
    by the ``version`` field: the stored version must equal the version
    the caller loaded, otherwise ConcurrencyError is raised. Listeners are
    told the workflow ID after every successful write.
    """

    def __init__(self, collection: Optional[Collection] = None):
        self._workflows: Collection = collection if collection is not None else get_collection(WORKFLOWS)
        self._listeners: List[WorkflowListener] = []

    # =========================================================================
    # Change listeners
    # =========================================================================

    def add_listener(self, listener: WorkflowListener) -> None:
        """Register a callback invoked with the workflow ID after each write"""
        self._listeners.append(listener)

    def remove_listener(self, listener: WorkflowListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit_changed(self, workflow_id: str) -> None:
        # Refresh hints only; a failing listener never undoes the write
        for listener in list(self._listeners):
            try:
                listener(workflow_id)
            except Exception as e:
                logger.warning(
                    f"Workflow listener failed: {e}",
                    extra={"workflow_id": workflow_id}
                )

    # =========================================================================
    # Reads
    # =========================================================================

    def get_workflow(self, workflow_id: str) -> Optional[Workflow]:
        """Get workflow by ID"""
        doc = self._workflows.find_one({"workflow_id": workflow_id})
        if not doc:
            return None
        doc.pop("_id", None)
        try:
            return Workflow.model_validate(doc)
        except ValidationError as e:
            logger.error(
                f"Corrupted workflow data for {workflow_id}. Validation failed: {str(e)[:500]}",
                extra={"workflow_id": workflow_id}
            )
            raise

    def get_workflow_or_raise(self, workflow_id: str) -> Workflow:
        """Get workflow by ID or raise error"""
        workflow = self.get_workflow(workflow_id)
        if not workflow:
            raise WorkflowNotFoundError(f"Workflow {workflow_id} not found")
        return workflow

    def list_workflows(
        self,
        status: Optional[WorkflowStatus] = None,
        workflow_type: Optional[WorkflowType] = None,
        assignee_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 50
    ) -> List[Workflow]:
        """List workflows with optional filters. Corrupted records are skipped."""
        query: Dict[str, Any] = {}
        if status:
            query["status"] = status.value
        if workflow_type:
            query["type"] = workflow_type.value
        if assignee_id:
            query["stages.tasks.assigned_to.user_id"] = assignee_id

        cursor = self._workflows.find(query).sort("updated_at", DESCENDING).skip(skip).limit(limit)

        workflows = []
        for doc in cursor:
            doc.pop("_id", None)
            try:
                workflows.append(Workflow.model_validate(doc))
            except ValidationError as e:
                workflow_id = doc.get("workflow_id", "unknown")
                logger.warning(
                    f"Skipping corrupted workflow {workflow_id} in list. Errors: {len(e.errors())}",
                    extra={"workflow_id": workflow_id}
                )
        return workflows

    def count_workflows(
        self,
        status: Optional[WorkflowStatus] = None,
        workflow_type: Optional[WorkflowType] = None
    ) -> int:
        query: Dict[str, Any] = {}
        if status:
            query["status"] = status.value
        if workflow_type:
            query["type"] = workflow_type.value
        return self._workflows.count_documents(query)

    def count_active_for_template(self, template_id: str) -> int:
        """Number of In Progress workflows created from a template"""
        return self._workflows.count_documents({
            "template_id": template_id,
            "status": WorkflowStatus.IN_PROGRESS.value
        })

    # =========================================================================
    # Writes
    # =========================================================================

    def save_workflow(self, workflow: Workflow) -> Workflow:
        """
        Insert or replace a workflow document

        On replace, the stored version must match ``workflow.version``.
        The passed instance is updated in place with the new version and
        updated_at, and returned.

        Raises:
            ConcurrencyError: If another writer saved the workflow first
        """
        now = utc_now()
        expected_version = workflow.version

        existing = self._workflows.find_one({"workflow_id": workflow.workflow_id}, {"version": 1})
        if existing is None:
            workflow.updated_at = now
            doc = workflow.model_dump(mode="json")
            doc["_id"] = workflow.workflow_id
            self._workflows.insert_one(doc)
            logger.info(f"Created workflow: {workflow.workflow_id}", extra={"workflow_id": workflow.workflow_id})
        else:
            doc = workflow.model_copy(update={"version": expected_version + 1, "updated_at": now}).model_dump(mode="json")
            doc["_id"] = workflow.workflow_id
            result = self._workflows.replace_one(
                {"workflow_id": workflow.workflow_id, "version": expected_version},
                doc
            )
            if result.matched_count == 0:
                raise ConcurrencyError(
                    f"Workflow {workflow.workflow_id} was modified. Please refresh and try again.",
                    details={"expected_version": expected_version, "stored_version": existing.get("version")}
                )
            workflow.version = expected_version + 1
            workflow.updated_at = now
            logger.info(
                f"Saved workflow: {workflow.workflow_id}",
                extra={"workflow_id": workflow.workflow_id, "status": workflow.status.value}
            )

        self._emit_changed(workflow.workflow_id)
        return workflow

    def delete_workflow(self, workflow_id: str) -> bool:
        """Delete a workflow, returning whether it existed"""
        result = self._workflows.delete_one({"workflow_id": workflow_id})
        if result.deleted_count:
            logger.info(f"Deleted workflow: {workflow_id}", extra={"workflow_id": workflow_id})
            self._emit_changed(workflow_id)
            return True
        return False
