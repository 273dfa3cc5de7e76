"""
Pytest Configuration and Fixtures

Repositories run against FakeCollection, an in-memory stand-in for the
handful of pymongo Collection methods they call, so every test goes
through the real repository code without a MongoDB server.
"""
import pytest

from hrflow.domain.models import ActorContext, UserRef
from hrflow.domain.enums import Department
from hrflow.engine.lifecycle import WorkflowLifecycleController
from hrflow.engine.task_sequencer import TaskSequencer
from hrflow.engine.template_instantiator import TemplateInstantiator
from hrflow.repositories.workflow_repo import WorkflowRepository
from hrflow.repositories.template_repo import TemplateRepository
from hrflow.repositories.account_repo import AccountRepository
from hrflow.repositories.notification_repo import NotificationRepository
from hrflow.repositories.user_repo import UserRepository
from hrflow.services.workflow_service import WorkflowService
from hrflow.services.task_service import TaskService
from hrflow.services.comment_service import CommentService
from hrflow.services.template_service import TemplateService
from hrflow.services.account_service import AccountService
from hrflow.services.notification_service import NotificationService

from tests.fakes import FakeCollection
from tests.factories import make_task, make_workflow


# =============================================================================
# Repositories
# =============================================================================

@pytest.fixture
def workflow_collection():
    return FakeCollection()


@pytest.fixture
def workflow_repo(workflow_collection):
    return WorkflowRepository(collection=workflow_collection)


@pytest.fixture
def template_repo():
    return TemplateRepository(collection=FakeCollection())


@pytest.fixture
def account_repo():
    return AccountRepository(collection=FakeCollection())


@pytest.fixture
def notification_repo():
    return NotificationRepository(collection=FakeCollection())


@pytest.fixture
def alice():
    return UserRef(user_id="u-alice", name="Alice Perera", email="alice@company.com", department=Department.HR)


@pytest.fixture
def bob():
    return UserRef(user_id="u-bob", name="Bob Silva", email="bob@company.com", department=Department.IT)


@pytest.fixture
def user_repo(alice, bob):
    repo = UserRepository(collection=FakeCollection())
    repo.save_user(alice)
    repo.save_user(bob)
    return repo


@pytest.fixture
def actor():
    return ActorContext(user_id="u-admin", name="Admin User", email="admin@company.com", is_admin=True)


# =============================================================================
# Engine & services
# =============================================================================

@pytest.fixture
def sequencer():
    return TaskSequencer()


@pytest.fixture
def lifecycle(workflow_repo, account_repo, notification_repo, user_repo):
    return WorkflowLifecycleController(
        workflow_repo=workflow_repo,
        account_repo=account_repo,
        notification_repo=notification_repo,
        user_repo=user_repo
    )


@pytest.fixture
def instantiator(user_repo):
    return TemplateInstantiator(user_repo=user_repo, regenerate_ids=False)


@pytest.fixture
def task_service(workflow_repo, notification_repo, user_repo, lifecycle):
    return TaskService(
        workflow_repo=workflow_repo,
        notification_repo=notification_repo,
        user_repo=user_repo,
        lifecycle=lifecycle,
        auto_complete=True
    )


@pytest.fixture
def workflow_service(workflow_repo, template_repo, account_repo, notification_repo, user_repo, instantiator):
    return WorkflowService(
        workflow_repo=workflow_repo,
        template_repo=template_repo,
        account_repo=account_repo,
        notification_repo=notification_repo,
        user_repo=user_repo,
        instantiator=instantiator
    )


@pytest.fixture
def comment_service(workflow_repo):
    return CommentService(workflow_repo=workflow_repo)


@pytest.fixture
def template_service(template_repo, workflow_repo, instantiator):
    return TemplateService(template_repo=template_repo, workflow_repo=workflow_repo, instantiator=instantiator)


@pytest.fixture
def account_service(account_repo):
    return AccountService(account_repo=account_repo)


@pytest.fixture
def notification_service(notification_repo):
    return NotificationService(notification_repo=notification_repo)


@pytest.fixture
def saved_workflow(workflow_repo):
    """Three-task chain: t1 -> t2 -> t3, stored"""
    workflow = make_workflow([
        [make_task("t1"), make_task("t2", dependent_on=["t1"])],
        [make_task("t3", dependent_on=["t2"])],
    ])
    return workflow_repo.save_workflow(workflow)
