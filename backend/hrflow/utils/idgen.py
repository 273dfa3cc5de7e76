"""ID Generation Utilities"""
import uuid
from datetime import datetime, timezone
from typing import Optional


def generate_id(prefix: Optional[str] = None) -> str:
    """
    Generate a unique ID with optional prefix

    Args:
        prefix: Optional prefix for the ID (e.g., 'WF', 'TSK', 'CMT')

    Returns:
        Unique ID string

    Examples:
        >>> generate_id('WF')
        'WF-a1b2c3d4e5f6'
        >>> generate_id()
        'a1b2c3d4e5f6'
    """
    unique_part = uuid.uuid4().hex[:12]

    if prefix:
        return f"{prefix}-{unique_part}"
    return unique_part


def generate_workflow_id() -> str:
    """Generate workflow ID"""
    return generate_id("WF")


def generate_template_id() -> str:
    """Generate workflow template ID"""
    return generate_id("TPL")


def generate_stage_id() -> str:
    """Generate stage ID"""
    return generate_id("STG")


def generate_task_id() -> str:
    """Generate task ID"""
    return generate_id("TSK")


def generate_comment_id() -> str:
    """Generate comment ID"""
    return generate_id("CMT")


def generate_account_id() -> str:
    """Generate employee account ID"""
    return generate_id("ACC")


def generate_notification_id() -> str:
    """Generate notification ID"""
    return generate_id("NTF")


def generate_correlation_id() -> str:
    """
    Generate a correlation ID for request tracing

    Returns:
        Correlation ID string with timestamp prefix
    """
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    unique_part = uuid.uuid4().hex[:8]
    return f"COR-{timestamp}-{unique_part}"
