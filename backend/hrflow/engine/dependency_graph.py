"""Dependency Graph Validation - Structural checks on task prerequisites"""
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ..domain.enums import DependencyIssueType
from ..domain.errors import DependencyCycleError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

WHITE, GRAY, BLACK = 0, 1, 2


class DependencyNode(Protocol):
    """Anything with an ID and a prerequisite list (Task, TemplateTask)"""
    task_id: str
    dependent_on: List[str]


def find_cycle(nodes: Sequence[DependencyNode], ignore_self_loops: bool = False) -> Optional[List[str]]:
    """
    Find one dependency cycle, if any

    Depth-first search with white/gray/black marking. An edge into a
    gray node closes a cycle; the returned path starts and ends with the
    same task ID, e.g. ``["a", "b", "a"]``. Edges to unknown IDs are
    ignored here.
    """
    graph: Dict[str, List[str]] = {}
    for node in nodes:
        deps = [d for d in node.dependent_on if not (ignore_self_loops and d == node.task_id)]
        graph.setdefault(node.task_id, deps)

    color = {task_id: WHITE for task_id in graph}

    for root in graph:
        if color[root] != WHITE:
            continue

        path: List[str] = [root]
        stack = [iter(graph[root])]
        color[root] = GRAY

        while stack:
            child = next(stack[-1], None)
            if child is None:
                color[path.pop()] = BLACK
                stack.pop()
                continue
            if child not in graph:
                continue
            if color[child] == GRAY:
                start = path.index(child)
                return path[start:] + [child]
            if color[child] == WHITE:
                color[child] = GRAY
                path.append(child)
                stack.append(iter(graph[child]))

    return None


def find_dependency_issues(nodes: Sequence[DependencyNode]) -> List[Dict[str, Any]]:
    """
    Collect every structural problem in a dependency graph

    Returns:
        List of ``{"type", "message", "task_id", ...}`` dicts, empty when valid
    """
    issues: List[Dict[str, Any]] = []
    seen = set()

    for node in nodes:
        if node.task_id in seen:
            issues.append({
                "type": DependencyIssueType.DUPLICATE_TASK_ID.value,
                "message": f"Task ID '{node.task_id}' is used more than once",
                "task_id": node.task_id
            })
        seen.add(node.task_id)

    for node in nodes:
        for dep_id in node.dependent_on:
            if dep_id == node.task_id:
                issues.append({
                    "type": DependencyIssueType.SELF_DEPENDENCY.value,
                    "message": f"Task '{node.task_id}' depends on itself",
                    "task_id": node.task_id
                })
            elif dep_id not in seen:
                issues.append({
                    "type": DependencyIssueType.UNKNOWN_DEPENDENCY.value,
                    "message": f"Task '{node.task_id}' depends on unknown task '{dep_id}'",
                    "task_id": node.task_id,
                    "dependency_id": dep_id
                })

    # Self-loops are already reported above
    cycle = find_cycle(nodes, ignore_self_loops=True)
    if cycle:
        issues.append({
            "type": DependencyIssueType.CYCLE.value,
            "message": "Circular dependency: " + " -> ".join(cycle),
            "task_id": cycle[0],
            "cycle": cycle
        })

    return issues


def validate_dependency_graph(nodes: Sequence[DependencyNode]) -> None:
    """
    Raise if the dependency graph is not a valid DAG over known tasks

    Raises:
        DependencyCycleError: If the graph contains a cycle
        ValidationError: For self, unknown or duplicate references
    """
    issues = find_dependency_issues(nodes)
    if not issues:
        return

    logger.warning(f"Dependency graph rejected with {len(issues)} issue(s)")

    for issue in issues:
        if issue["type"] == DependencyIssueType.CYCLE.value:
            raise DependencyCycleError(issue["message"], cycle=issue["cycle"], details={"issues": issues})

    raise ValidationError(issues[0]["message"], details={"issues": issues})
