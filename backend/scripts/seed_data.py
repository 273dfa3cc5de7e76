"""
Seed Data Script - Creates directory users and the default checklists
Run: python -m scripts.seed_data
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hrflow.repositories.mongo_client import create_indexes
from hrflow.repositories.template_repo import TemplateRepository
from hrflow.repositories.user_repo import UserRepository
from hrflow.domain.models import Client, UserRef, WorkflowTemplate
from hrflow.domain.enums import Department, WorkflowType
from hrflow.utils.time import utc_now


CLIENTS = {
    "inet": Client(client_id="CLI-001", name="Inet Solutions"),
    "pickme": Client(client_id="CLI-002", name="PickMe"),
    "internal": Client(client_id="CLI-003", name="Internal Projects"),
}

USERS = [
    UserRef(user_id="USR-001", name="Sarah Johnson", email="sarah@company.com", department=Department.HR, is_admin=True),
    UserRef(user_id="USR-002", name="Michael Chen", email="michael@company.com", department=Department.IT),
    UserRef(user_id="USR-003", name="Emily Davis", email="emily@company.com", department=Department.FINANCE),
    UserRef(user_id="USR-004", name="James Wilson", email="james@company.com", department=Department.HR),
    UserRef(user_id="USR-005", name="Anna Martinez", email="anna@company.com", department=Department.IT),
]


def _task(task_id, name, department, assignee, action_type=None, depends=None, indent=0):
    return {
        "task_id": task_id,
        "name": name,
        "department": department,
        "default_assignee_id": assignee,
        "action_type": action_type,
        "dependent_on": depends or [],
        "indent": indent,
    }


ONBOARDING_STAGES = [
    {
        "stage_id": "STG-ON-1",
        "name": "At Offer Stage",
        "order": 1,
        "tasks": [
            _task("TSK-ON-01", "Send offer letter", "HR", "USR-001", "SEND_DOCUMENTS"),
            _task("TSK-ON-02", "Collect signed documents", "HR", "USR-001", "COLLECT_DOCUMENTS", ["TSK-ON-01"]),
            _task("TSK-ON-03", "Background verification", "HR", "USR-004", None, ["TSK-ON-02"], indent=1),
        ],
    },
    {
        "stage_id": "STG-ON-2",
        "name": "Week Before DOJ",
        "order": 2,
        "tasks": [
            _task("TSK-ON-04", "Create email account", "IT", "USR-002", "CREATE_CREDENTIALS", ["TSK-ON-02"]),
            _task("TSK-ON-05", "Setup workstation", "IT", "USR-005", "ASSIGN_ASSETS"),
            _task("TSK-ON-06", "Prepare payroll entry", "Finance", "USR-003", "SYSTEM_UPDATE", ["TSK-ON-02"]),
        ],
    },
    {
        "stage_id": "STG-ON-3",
        "name": "By DOJ",
        "order": 3,
        "tasks": [
            _task("TSK-ON-07", "Conduct orientation", "HR", "USR-001"),
            _task("TSK-ON-08", "Assign access cards", "IT", "USR-002", "ASSIGN_ASSETS", ["TSK-ON-04"]),
            _task("TSK-ON-09", "Complete joining formalities", "HR", "USR-004", None, ["TSK-ON-07", "TSK-ON-08"]),
        ],
    },
]

OFFBOARDING_STAGES = [
    {
        "stage_id": "STG-OFF-1",
        "name": "Initiation",
        "order": 1,
        "tasks": [
            _task("TSK-OFF-01", "Receive resignation letter", "HR", "USR-001", "COLLECT_DOCUMENTS"),
            _task("TSK-OFF-02", "Schedule exit interview", "HR", "USR-004", "EXTERNAL_COMMUNICATION", ["TSK-OFF-01"]),
        ],
    },
    {
        "stage_id": "STG-OFF-2",
        "name": "Access Revocation",
        "order": 2,
        "tasks": [
            _task("TSK-OFF-03", "Revoke system access", "IT", "USR-002", "DEACTIVATE_ACCOUNT", ["TSK-OFF-01"]),
            _task("TSK-OFF-04", "Disable email account", "IT", "USR-005", "DEACTIVATE_ACCOUNT", ["TSK-OFF-03"]),
        ],
    },
    {
        "stage_id": "STG-OFF-3",
        "name": "Asset Return and Closure",
        "order": 3,
        "tasks": [
            _task("TSK-OFF-05", "Collect company assets", "IT", "USR-002", "RETURN_ASSETS"),
            _task("TSK-OFF-06", "Process final settlement", "Finance", "USR-003", "SYSTEM_UPDATE", ["TSK-OFF-05"]),
            _task("TSK-OFF-07", "Issue experience letter", "HR", "USR-001", "SEND_DOCUMENTS", ["TSK-OFF-06"]),
        ],
    },
]


def seed_users(repo: UserRepository) -> None:
    for user in USERS:
        repo.save_user(user)
        print(f"  user    {user.user_id}  {user.name}")


def seed_templates(repo: TemplateRepository) -> None:
    now = utc_now()
    templates = [
        ("TPL-ONBOARDING", "Standard Onboarding", WorkflowType.ONBOARDING, ONBOARDING_STAGES),
        ("TPL-OFFBOARDING", "Standard Offboarding", WorkflowType.OFFBOARDING, OFFBOARDING_STAGES),
    ]
    for template_id, name, workflow_type, stages in templates:
        if repo.get_template(template_id):
            print(f"  template {template_id} already exists, skipping")
            continue
        template = WorkflowTemplate.model_validate({
            "template_id": template_id,
            "name": name,
            "type": workflow_type,
            "client": CLIENTS["internal"],
            "stages": stages,
            "created_at": now,
            "updated_at": now,
        })
        repo.save_template(template)
        print(f"  template {template_id}  {name}")


def main():
    print("Creating indexes...")
    create_indexes()

    print("Seeding directory users...")
    seed_users(UserRepository())

    print("Seeding templates...")
    seed_templates(TemplateRepository())

    print("Done.")


if __name__ == "__main__":
    main()
