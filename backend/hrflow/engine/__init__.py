"""Workflow Engine - Dependency gating, sequencing and lifecycle"""
from .dependency_resolver import DependencyResolver
from .dependency_graph import find_cycle, find_dependency_issues, validate_dependency_graph
from .task_sequencer import TaskSequencer
from .lifecycle import WorkflowLifecycleController
from .template_instantiator import TemplateInstantiator

__all__ = [
    "DependencyResolver",
    "find_cycle",
    "find_dependency_issues",
    "validate_dependency_graph",
    "TaskSequencer",
    "WorkflowLifecycleController",
    "TemplateInstantiator",
]
