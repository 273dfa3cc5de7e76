"""Comment Service - Task discussion threads"""
from typing import List, Optional, Tuple

from ..domain.models import Comment, CommentAuthor, Task, Workflow
from ..domain.errors import (
    WorkflowNotFoundError, TaskNotFoundError, CommentNotFoundError, ValidationError
)
from ..engine.comment_thread import build_comment, find_comment
from ..engine.task_sequencer import TaskSequencer
from ..repositories.workflow_repo import WorkflowRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)


class CommentService:
    """
    Add comments and replies to task threads

    Every write loads the whole workflow, appends to the tree in memory and
    saves the workflow back. Lookups that fail raise a NotFoundError
    before anything is written.
    """

    def __init__(
        self,
        workflow_repo: Optional[WorkflowRepository] = None,
        sequencer: Optional[TaskSequencer] = None
    ):
        self.workflow_repo = workflow_repo or WorkflowRepository()
        self.sequencer = sequencer or TaskSequencer()

    def _load_task(self, workflow_id: str, task_id: str) -> Tuple[Workflow, Task]:
        workflow = self.workflow_repo.get_workflow(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(f"Workflow {workflow_id} not found")
        task = self.sequencer.find_task(workflow, task_id)
        if task is None:
            raise TaskNotFoundError(
                f"Task {task_id} not found in workflow {workflow_id}",
                details={"workflow_id": workflow_id, "task_id": task_id}
            )
        return workflow, task

    @staticmethod
    def _require_text(text: str) -> str:
        if not text or not text.strip():
            raise ValidationError("Comment text cannot be empty")
        return text.strip()

    def list_comments(self, workflow_id: str, task_id: str) -> List[Comment]:
        """Get a task's top-level comments with their reply trees"""
        _, task = self._load_task(workflow_id, task_id)
        return task.comments

    def add_comment(self, workflow_id: str, task_id: str, text: str, author: CommentAuthor) -> Comment:
        """Append a top-level comment to a task"""
        text = self._require_text(text)
        workflow, task = self._load_task(workflow_id, task_id)

        comment = build_comment(text, author)
        task.comments.append(comment)
        self.workflow_repo.save_workflow(workflow)

        logger.info(
            "Comment added",
            extra={"workflow_id": workflow_id, "task_id": task_id, "comment_id": comment.comment_id}
        )
        return comment

    def add_reply(
        self,
        workflow_id: str,
        task_id: str,
        comment_id: str,
        text: str,
        author: CommentAuthor
    ) -> Comment:
        """Append a reply under any comment of the task's thread"""
        text = self._require_text(text)
        workflow, task = self._load_task(workflow_id, task_id)

        parent = find_comment(task.comments, comment_id)
        if parent is None:
            raise CommentNotFoundError(
                f"Comment {comment_id} not found on task {task_id}",
                details={"workflow_id": workflow_id, "task_id": task_id, "comment_id": comment_id}
            )

        reply = build_comment(text, author)
        parent.replies.append(reply)
        self.workflow_repo.save_workflow(workflow)

        logger.info(
            f"Reply added to comment {comment_id}",
            extra={"workflow_id": workflow_id, "task_id": task_id, "comment_id": reply.comment_id}
        )
        return reply
