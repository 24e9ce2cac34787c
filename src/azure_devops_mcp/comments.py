"""Rebuild nested reply trees from Azure DevOps comment threads.

Azure DevOps returns each pull request thread as a flat list of comments in
which replies point at their parent through ``parent_comment_id``. This module
turns every usable thread into a single root ``ReconstructedComment`` with its
replies nested below it.

The tree is assembled with an id -> node table and a second attaching pass,
never by recursive traversal: the provider guarantees neither a depth bound
nor the absence of cycles. A comment whose parent id points at itself or at
another comment of a cycle is simply attached and never reached from a root.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from azure_devops_mcp.schemas import CommentLocation, ReconstructedComment
from azure_devops_mcp.status import thread_status_code, thread_status_to_string
from azure_devops_mcp.utils.logging import get_logger


def _author_name(comment: Any) -> str | None:
    author = getattr(comment, "author", None)
    return getattr(author, "display_name", None) if author is not None else None


def is_reconstructable(thread: Any) -> bool:
    """Check that a thread carries everything a ReconstructedComment needs.

    A thread qualifies when it has a thread context with a file path, at least
    one comment, a first comment with content and an author display name, a
    status that resolves to a status code, and an integer id.
    """
    context = getattr(thread, "thread_context", None)
    if context is None or not getattr(context, "file_path", None):
        return False

    comments = getattr(thread, "comments", None)
    if not comments:
        return False
    first = comments[0]
    if not getattr(first, "content", None) or not _author_name(first):
        return False

    if thread_status_code(getattr(thread, "status", None)) is None:
        return False

    thread_id = getattr(thread, "id", None)
    return isinstance(thread_id, int) and not isinstance(thread_id, bool)


def _location(context: Any) -> CommentLocation:
    start = getattr(context, "right_file_start", None)
    end = getattr(context, "right_file_end", None)
    return CommentLocation(
        start_line=getattr(start, "line", None),
        end_line=getattr(end, "line", None),
        start_offset=getattr(start, "offset", None),
        end_offset=getattr(end, "offset", None),
    )


def flatten_thread(thread: Any) -> list[ReconstructedComment]:
    """Map every comment of a qualifying thread to a reply-less node.

    Args:
        thread: A thread for which ``is_reconstructable`` holds

    Returns:
        Nodes in provider comment order
    """
    context = thread.thread_context
    location = _location(context)
    status = thread_status_to_string(thread_status_code(thread.status))

    return [
        ReconstructedComment(
            file_path=context.file_path,
            location=location.model_copy(),
            content=getattr(comment, "content", None) or "",
            status=status,
            thread_id=thread.id,
            author=_author_name(comment) or "",
            comment_id=getattr(comment, "id", None) or 0,
            parent_comment_id=getattr(comment, "parent_comment_id", None) or 0,
        )
        for comment in thread.comments
    ]


def build_reply_tree(nodes: Sequence[ReconstructedComment]) -> list[ReconstructedComment]:
    """Attach replies to their parents and return the top-level comments.

    Replies are appended in input order. A reply whose parent id matches no
    node is dropped: it is neither a top-level comment nor attached anywhere.

    Args:
        nodes: Comments of one thread, as produced by ``flatten_thread``

    Returns:
        Comments whose parent id is 0, with replies attached
    """
    by_id = {node.comment_id: node for node in nodes}

    top_level: list[ReconstructedComment] = []
    for node in nodes:
        if node.parent_comment_id == 0:
            top_level.append(node)
            continue
        parent = by_id.get(node.parent_comment_id)
        if parent is not None:
            parent.replies.append(node)

    return top_level


def comment_tree_to_dict(root: ReconstructedComment) -> dict[str, Any]:
    """Dump a comment tree to camelCase JSON data, replies last, unset fields omitted.

    pydantic's own dump recurses into ``replies`` and gives up on long reply
    chains, so each node is dumped without its replies and the nesting is
    rebuilt with an explicit stack.
    """

    def dump(node: ReconstructedComment) -> dict[str, Any]:
        data = node.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"replies"})
        data["replies"] = []
        return data

    root_data = dump(root)
    pending = [(root, root_data)]
    while pending:
        node, data = pending.pop()
        for reply in node.replies:
            reply_data = dump(reply)
            data["replies"].append(reply_data)
            pending.append((reply, reply_data))

    return root_data


def process_pull_request_comments(threads: Iterable[Any]) -> list[ReconstructedComment]:
    """Convert pull request threads into one nested comment tree per thread.

    Threads missing a file path, author, content, status or id are skipped.
    For each remaining thread the first top-level comment is emitted with its
    replies; further top-level comments of the same thread are discarded, and
    a thread without any top-level comment emits nothing.

    Args:
        threads: Threads as returned by ``GitClient.get_threads``

    Returns:
        Root comments in provider thread order
    """
    logger = get_logger()
    results: list[ReconstructedComment] = []

    for thread in threads or []:
        if not is_reconstructable(thread):
            continue

        top_level = build_reply_tree(flatten_thread(thread))
        if not top_level:
            logger.debug("Skipping thread without a top-level comment", component="API", thread_id=thread.id)
            continue
        if len(top_level) > 1:
            logger.debug(
                "Discarding extra top-level comments",
                component="API",
                thread_id=thread.id,
                discarded=len(top_level) - 1,
            )
        results.append(top_level[0])

    return results
