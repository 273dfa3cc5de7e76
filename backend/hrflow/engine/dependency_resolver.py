"""Dependency Resolver - Decide whether a task is unlocked"""
from typing import Dict, List, Optional

from ..domain.models import Workflow, Task
from ..domain.enums import TaskStatus
from ..utils.logger import get_logger

logger = get_logger(__name__)


class DependencyResolver:
    """
    Resolve task availability from declared prerequisites

    A task is available when every task ID in its ``dependent_on`` set
    resolves to a task of the same workflow whose status is Done.

    Evaluation is a single pass over the direct dependency set (no
    transitive closure), so a cyclic graph can never loop here. A
    dependency ID that does not resolve counts as unsatisfied.
    Terminal workflows report every task as unavailable.
    """

    def index_tasks(self, workflow: Workflow) -> Dict[str, Task]:
        """Map task ID -> task across all stages (first occurrence wins)"""
        index: Dict[str, Task] = {}
        for stage in workflow.stages:
            for task in stage.tasks:
                index.setdefault(task.task_id, task)
        return index

    def is_available(self, workflow: Workflow, task_id: str) -> bool:
        """
        Check whether a task may be worked on

        Args:
            workflow: Workflow containing the task
            task_id: Task to check

        Returns:
            True if the task exists and all its dependencies are Done
        """
        if workflow.is_terminal:
            return False

        tasks = self.index_tasks(workflow)
        task = tasks.get(task_id)
        if task is None:
            logger.debug(
                f"Availability check for unknown task {task_id}",
                extra={"workflow_id": workflow.workflow_id, "task_id": task_id}
            )
            return False

        return not self._unmet(task, tasks)

    def blocking_dependencies(self, workflow: Workflow, task_id: str) -> List[str]:
        """
        Get the dependency IDs that keep a task locked, in declared order

        Unknown task IDs yield an empty list; use is_available to tell
        the two cases apart.
        """
        tasks = self.index_tasks(workflow)
        task = tasks.get(task_id)
        if task is None:
            return []
        return self._unmet(task, tasks)

    def available_tasks(self, workflow: Workflow) -> List[Task]:
        """Tasks that are unlocked and not yet Done, in flattened order"""
        if workflow.is_terminal:
            return []
        tasks = self.index_tasks(workflow)
        return [
            task for task in self._ordered(workflow)
            if task.status != TaskStatus.DONE and not self._unmet(task, tasks)
        ]

    def locked_tasks(self, workflow: Workflow) -> List[Task]:
        """Tasks with at least one unfinished dependency, in flattened order"""
        tasks = self.index_tasks(workflow)
        return [task for task in self._ordered(workflow) if self._unmet(task, tasks)]

    def _unmet(self, task: Task, tasks: Dict[str, Task]) -> List[str]:
        unmet = []
        for dep_id in task.dependent_on:
            dep = tasks.get(dep_id)
            if dep is None or dep.status != TaskStatus.DONE:
                unmet.append(dep_id)
        return unmet

    def _ordered(self, workflow: Workflow) -> List[Task]:
        stages = sorted(workflow.stages, key=lambda s: s.order)
        return [task for stage in stages for task in stage.tasks]
