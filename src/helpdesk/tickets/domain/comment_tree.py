"""Threaded comment assembly."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from helpdesk.tickets.domain.entities import Comment


@dataclass
class CommentNode:
    comment: Comment
    replies: List["CommentNode"] = field(default_factory=list)


def build_comment_tree(comments: Iterable[Comment]) -> List[CommentNode]:
    """
    Arrange a flat, ordered comment list into a forest.

    Replies keep the order they were supplied in. A comment whose parent
    is not in the list becomes a root.
    """
    comments = list(comments)
    nodes: Dict[str, CommentNode] = {c.id: CommentNode(c) for c in comments}
    roots: List[CommentNode] = []

    for comment in comments:
        node = nodes[comment.id]
        parent = nodes.get(comment.parent_comment_id) if comment.parent_comment_id else None
        if parent is not None and parent is not node:
            parent.replies.append(node)
        else:
            roots.append(node)

    return roots
