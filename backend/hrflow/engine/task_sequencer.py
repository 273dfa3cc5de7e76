"""Task Sequencer - Linear task order and next-task lookup"""
from typing import List, Optional

from ..domain.models import Workflow, Stage, Task
from ..domain.enums import TaskStatus
from .dependency_resolver import DependencyResolver


class TaskSequencer:
    """
    Flatten a workflow's stages into its canonical task sequence

    Stages are ordered by ``order`` ascending and their tasks are
    concatenated in stored order. The sequence is positional: the next
    task may still be locked by its dependencies.
    """

    def __init__(self, resolver: Optional[DependencyResolver] = None):
        self.resolver = resolver or DependencyResolver()

    def flatten_tasks(self, workflow: Workflow) -> List[Task]:
        """Get every task of the workflow in sequence order"""
        # sorted() is stable, so equal orders keep their stored position
        stages = sorted(workflow.stages, key=lambda s: s.order)
        return [task for stage in stages for task in stage.tasks]

    def find_task(self, workflow: Workflow, task_id: str) -> Optional[Task]:
        """Find a task by ID across all stages"""
        for stage in workflow.stages:
            for task in stage.tasks:
                if task.task_id == task_id:
                    return task
        return None

    def find_stage_for_task(self, workflow: Workflow, task_id: str) -> Optional[Stage]:
        """Find the stage that holds a task"""
        for stage in workflow.stages:
            if any(task.task_id == task_id for task in stage.tasks):
                return stage
        return None

    def next_task(self, workflow: Workflow, current_task_id: str) -> Optional[Task]:
        """Alias of next_positional_task"""
        return self.next_positional_task(workflow, current_task_id)

    def next_positional_task(self, workflow: Workflow, current_task_id: str) -> Optional[Task]:
        """
        Get the task that follows current_task_id in sequence order

        Returns:
            The following task, or None if the current task is last,
            unknown, or the workflow is terminal
        """
        if workflow.is_terminal:
            return None

        tasks = self.flatten_tasks(workflow)
        for index, task in enumerate(tasks):
            if task.task_id == current_task_id:
                if index < len(tasks) - 1:
                    return tasks[index + 1]
                return None
        return None

    def next_available_task(self, workflow: Workflow, current_task_id: str) -> Optional[Task]:
        """
        Get the first task after current_task_id that is unlocked and not Done

        Unlike next_positional_task this skips tasks still gated by
        dependencies.
        """
        if workflow.is_terminal:
            return None

        tasks = self.flatten_tasks(workflow)
        position = next((i for i, t in enumerate(tasks) if t.task_id == current_task_id), None)
        if position is None:
            return None

        for task in tasks[position + 1:]:
            if task.status != TaskStatus.DONE and self.resolver.is_available(workflow, task.task_id):
                return task
        return None

    def all_tasks_done(self, workflow: Workflow) -> bool:
        """True when every task in every stage is Done"""
        return all(task.status == TaskStatus.DONE for task in self.flatten_tasks(workflow))
