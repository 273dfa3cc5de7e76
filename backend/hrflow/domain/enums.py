"""Domain Enumerations - All status and type definitions"""
from enum import Enum
from typing import Any


class Department(str, Enum):
    """Owning department of a task or employee"""
    HR = "HR"
    IT = "IT"
    FINANCE = "Finance"
    MARKETING = "Marketing"


class WorkflowType(str, Enum):
    """Kind of employee event a workflow tracks"""
    ONBOARDING = "Onboarding"
    OFFBOARDING = "Offboarding"


class WorkflowStatus(str, Enum):
    """Workflow lifecycle status"""
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkflowStatus.COMPLETED, WorkflowStatus.CANCELLED)


class TaskStatus(str, Enum):
    """Runtime status of a workflow task"""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    NEED_INFO = "Need Info"
    DONE = "Done"


# Older records were written with a different status vocabulary
LEGACY_TASK_STATUS_ALIASES = {
    "pending": TaskStatus.OPEN,
    "not started": TaskStatus.OPEN,
    "completed": TaskStatus.DONE,
    "need information": TaskStatus.NEED_INFO,
}


def normalize_task_status(value: Any) -> TaskStatus:
    """
    Map a stored task status onto the canonical four-value enum.

    Accepts canonical values, legacy aliases (Pending, Not Started,
    Completed, Need Information) and SCREAMING_SNAKE spellings,
    all case-insensitively.

    Raises:
        ValueError: If the value is not a known status
    """
    if isinstance(value, TaskStatus):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid task status: {value!r}")

    key = value.strip().replace("_", " ").lower()
    for status in TaskStatus:
        if status.value.lower() == key:
            return status
    if key in LEGACY_TASK_STATUS_ALIASES:
        return LEGACY_TASK_STATUS_ALIASES[key]
    raise ValueError(f"Invalid task status: {value!r}")


class Priority(str, Enum):
    """Task priority"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class AccountStatus(str, Enum):
    """Employee directory account status"""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class EmploymentType(str, Enum):
    """Employment contract type"""
    FULL_TIME = "Full-time"
    CONTRACT = "Contract"
    PART_TIME = "Part-time"
    INTERN = "Intern"


class WorkflowAction(str, Enum):
    """Action a task performs when it is worked (drives output_value)"""
    CREATE_CREDENTIALS = "CREATE_CREDENTIALS"
    COLLECT_DOCUMENTS = "COLLECT_DOCUMENTS"
    ASSIGN_ASSETS = "ASSIGN_ASSETS"
    RETURN_ASSETS = "RETURN_ASSETS"
    SEND_DOCUMENTS = "SEND_DOCUMENTS"
    DEACTIVATE_ACCOUNT = "DEACTIVATE_ACCOUNT"
    SYSTEM_UPDATE = "SYSTEM_UPDATE"
    EXTERNAL_COMMUNICATION = "EXTERNAL_COMMUNICATION"


class OffboardingType(str, Enum):
    """How the employment ended"""
    VOLUNTARY = "Voluntary"
    INVOLUNTARY = "Involuntary"
    MUTUAL = "Mutual"


class ExitReason(str, Enum):
    """Reason recorded for an offboarding"""
    CAREER_GROWTH = "Career Growth / Opportunity"
    WORK_LIFE_BALANCE = "Work–Life Balance"
    JOB_SATISFACTION = "Job Satisfaction"
    COMPENSATION = "Compensation & Benefits"
    RELOCATION = "Relocation or Life Changes"
    HEALTH = "Health Reasons"
    END_OF_INTERNSHIP = "End of Internship"
    END_OF_CONTRACT = "End of Contract"
    CLIENT_TERMINATION = "Client / Project Termination"
    PERFORMANCE = "Performance-Related Issues"
    MISCONDUCT = "Misconduct / Policy Violations"
    RESTRUCTURING = "Organizational Restructuring"
    MUTUAL_AGREEMENT = "Mutual Agreement"
    OTHER = "Other"


class NotificationType(str, Enum):
    """In-app notification kinds"""
    TASK_ASSIGNED = "task_assigned"
    TASK_COMPLETED = "task_completed"
    WORKFLOW_COMPLETED = "workflow_completed"
    WORKFLOW_CANCELLED = "workflow_cancelled"


class DependencyIssueType(str, Enum):
    """Problems found when validating a task dependency graph"""
    SELF_DEPENDENCY = "SELF_DEPENDENCY"
    UNKNOWN_DEPENDENCY = "UNKNOWN_DEPENDENCY"
    DUPLICATE_TASK_ID = "DUPLICATE_TASK_ID"
    CYCLE = "CYCLE"
