"""Domain Models - Pydantic schemas for all entities"""
from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, EmailStr, ConfigDict, field_validator

from .enums import (
    Department, WorkflowType, WorkflowStatus, TaskStatus, Priority, AccountStatus,
    EmploymentType, WorkflowAction, OffboardingType, ExitReason, NotificationType,
    normalize_task_status
)
from ..utils.time import parse_date


# ============================================================================
# People & Identity Snapshots
# ============================================================================

class Client(BaseModel):
    """Client organisation the employee is placed with"""
    model_config = ConfigDict(extra="ignore")

    client_id: str = Field(..., description="Client ID")
    name: str = Field(..., description="Client name")
    logo: Optional[str] = None


class UserRef(BaseModel):
    """Snapshot of a staff user (assignee, supervisor, actor)"""
    model_config = ConfigDict(extra="ignore")

    user_id: str = Field(..., description="Directory user ID")
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="User email")
    department: Optional[Department] = None
    avatar: Optional[str] = None
    is_admin: bool = Field(default=False, description="Advisory admin flag")


class ActorContext(BaseModel):
    """Current actor, taken from advisory request headers"""
    model_config = ConfigDict(extra="forbid")

    user_id: str = Field(..., description="Directory user ID")
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="User email")
    is_admin: bool = Field(default=False)

    def to_user_ref(self) -> UserRef:
        return UserRef(user_id=self.user_id, name=self.name, email=self.email, is_admin=self.is_admin)

    def to_comment_author(self) -> "CommentAuthor":
        return CommentAuthor(user_id=self.user_id, name=self.name, email=self.email, is_admin=self.is_admin)


# ============================================================================
# Comments
# ============================================================================

class CommentAuthor(BaseModel):
    """Author snapshot stored with a comment (not a live user reference)"""
    model_config = ConfigDict(extra="ignore")

    user_id: str
    name: str
    email: EmailStr
    is_admin: bool = False
    avatar: Optional[str] = None


class Comment(BaseModel):
    """Node in a task's reply tree"""
    model_config = ConfigDict(extra="ignore")

    comment_id: str = Field(..., description="Unique comment ID")
    text: str = Field(..., description="Comment body")
    author: CommentAuthor
    created_at: datetime
    replies: List["Comment"] = Field(default_factory=list, description="Child comments, oldest first")


Comment.model_rebuild()


# ============================================================================
# Tasks & Stages (runtime)
# ============================================================================

class TaskDocument(BaseModel):
    """Document produced or collected by a task"""
    model_config = ConfigDict(extra="ignore")

    name: str
    url: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class TaskOutput(BaseModel):
    """Free-form payload produced by a task's action type"""
    model_config = ConfigDict(extra="allow")

    email: Optional[EmailStr] = None
    password: Optional[str] = None
    documents: List[TaskDocument] = Field(default_factory=list)


class Task(BaseModel):
    """Unit of work inside a workflow stage"""
    model_config = ConfigDict(extra="ignore")

    task_id: str = Field(..., description="Unique within the workflow")
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    department: Department
    assigned_to: Optional[UserRef] = None
    status: TaskStatus = Field(default=TaskStatus.OPEN)
    priority: Optional[Priority] = None
    required_date: Optional[date] = None
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    action_type: Optional[WorkflowAction] = None
    output_value: Optional[TaskOutput] = None
    comments: List[Comment] = Field(default_factory=list)
    dependent_on: List[str] = Field(default_factory=list, description="Task IDs that must be Done first")
    indent: int = Field(default=0, ge=0, le=3, description="Presentation hint only")

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return normalize_task_status(value)

    @field_validator("dependent_on", mode="before")
    @classmethod
    def _default_dependencies(cls, value):
        return value or []


class Stage(BaseModel):
    """Ordered grouping of tasks within a workflow"""
    model_config = ConfigDict(extra="ignore")

    stage_id: str
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    order: int = Field(..., ge=1, description="1-based sequence position")
    tasks: List[Task] = Field(default_factory=list)


# ============================================================================
# Workflow (runtime instance)
# ============================================================================

class EmployeeSnapshot(BaseModel):
    """Employee details copied into a workflow at creation time"""
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    position: str
    department: Department
    employment_type: EmploymentType = Field(default=EmploymentType.FULL_TIME)
    supervisor_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        return parse_date(value)


class OffboardingDetails(BaseModel):
    """Offboarding-specific details captured when the workflow is started"""
    model_config = ConfigDict(extra="ignore")

    type: OffboardingType
    exit_reason: ExitReason
    last_working_day: date
    documents: List[str] = Field(default_factory=list)

    @field_validator("last_working_day", mode="before")
    @classmethod
    def _parse_last_day(cls, value):
        return parse_date(value)


class Workflow(BaseModel):
    """One onboarding or offboarding instance"""
    model_config = ConfigDict(extra="ignore")

    workflow_id: str = Field(..., description="Unique workflow ID")
    type: WorkflowType
    template_id: Optional[str] = Field(None, description="Originating template, if any")
    client: Client
    employee: EmployeeSnapshot
    offboarding_details: Optional[OffboardingDetails] = None
    stages: List[Stage] = Field(default_factory=list)
    status: WorkflowStatus = Field(default=WorkflowStatus.IN_PROGRESS)
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[UserRef] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    version: int = Field(default=1, description="Optimistic concurrency version")

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


# ============================================================================
# Templates (design time)
# ============================================================================

class TemplateTask(BaseModel):
    """Task definition inside a template stage"""
    model_config = ConfigDict(extra="ignore")

    task_id: str
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    department: Department
    priority: Optional[Priority] = None
    required_date: Optional[date] = None
    action_type: Optional[WorkflowAction] = None
    default_assignee_id: Optional[str] = Field(None, description="Directory user to assign by default")
    dependent_on: List[str] = Field(default_factory=list)
    indent: int = Field(default=0, ge=0, le=3)

    @field_validator("dependent_on", mode="before")
    @classmethod
    def _default_dependencies(cls, value):
        return value or []


class TemplateStage(BaseModel):
    """Stage definition inside a template"""
    model_config = ConfigDict(extra="ignore")

    stage_id: str
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    order: int = Field(..., ge=1)
    tasks: List[TemplateTask] = Field(default_factory=list)


class WorkflowTemplate(BaseModel):
    """Reusable stage/task graph"""
    model_config = ConfigDict(extra="ignore")

    template_id: str = Field(..., description="Unique template ID")
    name: str = Field(..., min_length=1)
    type: WorkflowType
    client: Optional[Client] = None
    stages: List[TemplateStage] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class WorkflowOverrides(BaseModel):
    """Per-instance values supplied when a template is instantiated"""
    model_config = ConfigDict(extra="forbid")

    workflow_id: Optional[str] = None
    employee: EmployeeSnapshot
    client: Optional[Client] = None
    offboarding_details: Optional[OffboardingDetails] = None
    assignments: Dict[str, Optional[str]] = Field(
        default_factory=dict, description="Template task ID -> directory user ID (None = unassigned)"
    )
    due_dates: Dict[str, date] = Field(default_factory=dict, description="Template task ID -> due date")


# ============================================================================
# Employee Directory
# ============================================================================

class EmployeeDocument(BaseModel):
    """Document stored on an employee account"""
    model_config = ConfigDict(extra="ignore")

    name: str
    url: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    type: Optional[str] = Field(None, description="e.g. NIC, BirthCertificate")


class EmployeeAccount(BaseModel):
    """Directory record, independent of any single workflow"""
    model_config = ConfigDict(extra="ignore")

    account_id: str = Field(..., description="Unique account ID")
    employee_no: Optional[str] = None

    # Identity & contact
    name: str
    display_name: Optional[str] = None
    email: EmailStr = Field(..., description="Office email, unique across accounts")
    personal_email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    # Employment
    position: str
    department: Department
    sub_department: Optional[str] = None
    client: Optional[Client] = None
    employment_type: EmploymentType = Field(default=EmploymentType.FULL_TIME)
    supervisor: Optional[UserRef] = None
    project: Optional[str] = None
    joined_date: Optional[date] = None
    contract_end_date: Optional[date] = None

    # System
    status: AccountStatus = Field(default=AccountStatus.ACTIVE)
    documents: List[EmployeeDocument] = Field(default_factory=list)
    onboarded_at: Optional[datetime] = None
    offboarded_at: Optional[datetime] = None

    # Offboarding persistence
    offboarding_type: Optional[OffboardingType] = None
    exit_reason: Optional[ExitReason] = None
    last_working_day: Optional[date] = None
    offboarding_documents: List[str] = Field(default_factory=list, description="URLs or names")

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# Notifications
# ============================================================================

class Notification(BaseModel):
    """In-app notification record"""
    model_config = ConfigDict(extra="ignore")

    notification_id: str
    type: NotificationType
    message: str
    workflow_id: str
    task_id: Optional[str] = None
    recipient_email: Optional[str] = Field(None, description="Targeted user, None for broadcast")
    read: bool = False
    created_at: datetime
