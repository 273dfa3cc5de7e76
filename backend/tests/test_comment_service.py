"""Tests for task comment threads"""
import sys

import pytest

from hrflow.domain.errors import (
    CommentNotFoundError, TaskNotFoundError, ValidationError, WorkflowNotFoundError
)
from hrflow.engine.comment_thread import build_comment, comment_depth, count_comments, find_comment, walk


@pytest.fixture
def author(actor):
    return actor.to_comment_author()


def test_add_comment_persists_on_task(comment_service, workflow_repo, saved_workflow, author):
    comment = comment_service.add_comment("WF-test", "t2", "  Waiting on the signed contract  ", author)

    assert comment.text == "Waiting on the signed contract"
    assert comment.replies == []
    stored = workflow_repo.get_workflow("WF-test")
    task = stored.stages[0].tasks[1]
    assert [c.comment_id for c in task.comments] == [comment.comment_id]
    assert task.comments[0].author.email == "admin@company.com"


def test_replies_nest_to_any_depth(comment_service, workflow_repo, saved_workflow, author):
    root = comment_service.add_comment("WF-test", "t1", "root", author)
    child = comment_service.add_reply("WF-test", "t1", root.comment_id, "child", author)
    grandchild = comment_service.add_reply("WF-test", "t1", child.comment_id, "grandchild", author)

    comments = comment_service.list_comments("WF-test", "t1")
    assert count_comments(comments) == 3
    assert comment_depth(comments, grandchild.comment_id) == 2
    assert find_comment(comments, child.comment_id).replies[0].text == "grandchild"


def test_thread_deeper_than_recursion_limit(author):
    root = build_comment("root", author)
    node = root
    for index in range(sys.getrecursionlimit() + 500):
        reply = build_comment(f"reply {index}", author)
        node.replies.append(reply)
        node = reply

    assert find_comment([root], node.comment_id) is node
    assert comment_depth([root], node.comment_id) == sys.getrecursionlimit() + 500
    assert count_comments([root]) == sys.getrecursionlimit() + 501


def test_walk_visits_parent_before_replies_and_siblings_in_order(author):
    first, second = build_comment("first", author), build_comment("second", author)
    first.replies.append(build_comment("first.1", author))
    second.replies.append(build_comment("second.1", author))

    assert [(c.text, depth) for c, depth in walk([first, second])] == [
        ("first", 0), ("first.1", 1), ("second", 0), ("second.1", 1)
    ]


def test_each_write_bumps_workflow_version(comment_service, workflow_repo, saved_workflow, author):
    comment_service.add_comment("WF-test", "t1", "one", author)
    comment_service.add_comment("WF-test", "t1", "two", author)
    assert workflow_repo.get_workflow("WF-test").version == 3


def test_unknown_workflow_raises(comment_service, author):
    with pytest.raises(WorkflowNotFoundError):
        comment_service.add_comment("WF-missing", "t1", "hello", author)


def test_unknown_task_raises_without_writing(comment_service, workflow_repo, saved_workflow, author):
    with pytest.raises(TaskNotFoundError):
        comment_service.add_comment("WF-test", "t9", "hello", author)
    assert workflow_repo.get_workflow("WF-test").version == 1


def test_reply_to_unknown_comment_raises(comment_service, workflow_repo, saved_workflow, author):
    comment_service.add_comment("WF-test", "t1", "root", author)
    with pytest.raises(CommentNotFoundError):
        comment_service.add_reply("WF-test", "t1", "CMT-missing", "hi", author)
    assert count_comments(comment_service.list_comments("WF-test", "t1")) == 1


def test_blank_comment_is_rejected(comment_service, saved_workflow, author):
    with pytest.raises(ValidationError):
        comment_service.add_comment("WF-test", "t1", "   ", author)


def test_reply_leaves_sibling_threads_untouched(comment_service, saved_workflow, author):
    first = comment_service.add_comment("WF-test", "t1", "first", author)
    second = comment_service.add_comment("WF-test", "t1", "second", author)
    comment_service.add_reply("WF-test", "t1", second.comment_id, "reply", author)

    comments = comment_service.list_comments("WF-test", "t1")
    assert comments[0].comment_id == first.comment_id
    assert comments[0].replies == []
    assert [r.text for r in comments[1].replies] == ["reply"]
