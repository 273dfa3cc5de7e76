"""Comment Thread - Operations on a task's nested reply tree"""
from typing import Iterator, List, Optional, Tuple

from ..domain.models import Comment, CommentAuthor
from ..utils.idgen import generate_comment_id
from ..utils.time import utc_now


def build_comment(text: str, author: CommentAuthor) -> Comment:
    """Create a new comment node with a fresh ID and no replies"""
    return Comment(
        comment_id=generate_comment_id(),
        text=text,
        author=author,
        created_at=utc_now(),
        replies=[]
    )


def find_comment(comments: List[Comment], comment_id: str) -> Optional[Comment]:
    """
    Depth-first search for a comment anywhere in a thread

    Each comment is checked before its replies, and siblings are
    visited in stored order.
    """
    for comment, _ in walk(comments):
        if comment.comment_id == comment_id:
            return comment
    return None


def walk(comments: List[Comment], depth: int = 0) -> Iterator[Tuple[Comment, int]]:
    """Yield (comment, depth) pairs in depth-first order; top level is depth 0"""
    # Explicit stack so thread depth is not bounded by the recursion limit
    stack = [(comment, depth) for comment in reversed(comments)]
    while stack:
        comment, level = stack.pop()
        yield comment, level
        stack.extend((reply, level + 1) for reply in reversed(comment.replies))


def comment_depth(comments: List[Comment], comment_id: str) -> Optional[int]:
    """Depth of a comment in the thread, or None if absent"""
    for comment, depth in walk(comments):
        if comment.comment_id == comment_id:
            return depth
    return None


def count_comments(comments: List[Comment]) -> int:
    """Total number of comments including all nested replies"""
    return sum(1 for _ in walk(comments))
