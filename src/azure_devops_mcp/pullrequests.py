"""Pull request operations.

Each operation takes an open connection and a validated request, performs
one unit of work through the SDK git client, and raises ``AzureDevOpsError``
on failure:

- RESOURCE_NOT_FOUND when the provider returns nothing for a specific entity
- OPERATION_FAILED, "Failed to <action>: <original message>", for anything else

The SDK is synchronous, so its calls run in a worker thread.
"""

import asyncio

from azure.devops.connection import Connection
from azure.devops.v7_1.git.models import (
    Comment,
    CommentPosition,
    CommentThreadContext,
    GitPullRequest,
    GitPullRequestChange,
    GitPullRequestCommentThread,
    GitPullRequestSearchCriteria,
)

from azure_devops_mcp.comments import process_pull_request_comments
from azure_devops_mcp.errors import operation_context, resource_not_found, validation_error
from azure_devops_mcp.schemas import (
    CreatePRCommentRequest,
    GetPRFilesRequest,
    GetPullRequestRequest,
    ListPRCommentsRequest,
    ListPullRequestsRequest,
    ReconstructedComment,
    ReplyToPRCommentRequest,
    UpdatePRCommentRequest,
    UpdatePRThreadStatusRequest,
)
from azure_devops_mcp.status import string_to_pull_request_status, string_to_thread_status
from azure_devops_mcp.utils.logging import get_logger

COMMENT_TYPE_TEXT = "text"


def _git_client(connection: Connection):
    return connection.clients.get_git_client()


async def get_pull_request(connection: Connection, req: GetPullRequestRequest) -> GitPullRequest:
    with operation_context("get pull request"):
        git = await asyncio.to_thread(_git_client, connection)
        pull_request = await asyncio.to_thread(
            git.get_pull_request, req.repository_id, req.pull_request_id, project=req.project_id
        )

        if not pull_request:
            raise resource_not_found(
                f"Pull request {req.pull_request_id} not found in repository {req.repository_id}",
                pull_request_id=req.pull_request_id,
                repository_id=req.repository_id,
            )

        return pull_request


async def list_pull_requests(
    connection: Connection, req: ListPullRequestsRequest
) -> list[GitPullRequest]:
    with operation_context("list pull requests"):
        git = await asyncio.to_thread(_git_client, connection)
        search_criteria = GitPullRequestSearchCriteria(
            status=string_to_pull_request_status(req.status).wire_name if req.status else None,
            creator_id=req.creator_id,
            reviewer_id=req.reviewer_id,
            source_ref_name=req.source_ref_name,
            target_ref_name=req.target_ref_name,
            include_links=req.include_links,
        )

        pull_requests = await asyncio.to_thread(
            git.get_pull_requests, req.repository_id, search_criteria, project=req.project_id
        )
        return list(pull_requests or [])


async def list_pr_comments(
    connection: Connection, req: ListPRCommentsRequest
) -> list[ReconstructedComment]:
    """List a pull request's comments as one reply tree per thread."""
    logger = get_logger()
    with operation_context("list PR comments"):
        logger.debug("Attempting to list PR comments...", component="API")
        git = await asyncio.to_thread(_git_client, connection)
        threads = await asyncio.to_thread(
            git.get_threads, req.repository_id, req.pull_request_id, project=req.project_id
        )
        logger.debug("Successfully retrieved PR threads", component="API", count=len(threads or []))

        comments = process_pull_request_comments(threads)
        logger.debug(f"Processed {len(comments)} comments with replies", component="API")
        return comments


async def update_pr_comment(connection: Connection, req: UpdatePRCommentRequest) -> Comment:
    with operation_context("update PR comment"):
        git = await asyncio.to_thread(_git_client, connection)
        updated = await asyncio.to_thread(
            git.update_comment,
            Comment(content=req.content),
            req.repository_id,
            req.pull_request_id,
            req.thread_id,
            req.comment_id,
            project=req.project_id,
        )

        if not updated:
            raise resource_not_found(
                f"Comment {req.comment_id} not found in thread {req.thread_id}",
                comment_id=req.comment_id,
                thread_id=req.thread_id,
            )

        return updated


async def update_pr_thread_status(
    connection: Connection, req: UpdatePRThreadStatusRequest
) -> GitPullRequestCommentThread:
    with operation_context("update thread status"):
        git = await asyncio.to_thread(_git_client, connection)
        thread = GitPullRequestCommentThread(status=string_to_thread_status(req.status).wire_name)

        updated = await asyncio.to_thread(
            git.update_thread,
            thread,
            req.repository_id,
            req.pull_request_id,
            req.thread_id,
            project=req.project_id,
        )

        if not updated:
            raise resource_not_found(
                f"Thread {req.thread_id} not found in pull request {req.pull_request_id}",
                thread_id=req.thread_id,
                pull_request_id=req.pull_request_id,
            )

        return updated


def build_thread_context(file_path: str | None, line_number: int | None) -> CommentThreadContext | None:
    """Anchor a new thread to a file line.

    With a file path the thread starts and ends at ``line_number`` (line 1 if
    omitted), offset 1. Without a file path there is no context and the thread
    applies to the pull request as a whole.
    """
    if not file_path:
        return None

    line = line_number if line_number is not None else 1
    return CommentThreadContext(
        file_path=file_path,
        right_file_start=CommentPosition(line=line, offset=1),
        right_file_end=CommentPosition(line=line, offset=1),
    )


async def create_pr_comment(
    connection: Connection, req: CreatePRCommentRequest
) -> GitPullRequestCommentThread:
    """Start a new comment thread, anchored to a file line when one is given."""
    logger = get_logger()
    with operation_context("create PR comment"):
        logger.debug("Attempting to create new PR comment thread...", component="API")
        git = await asyncio.to_thread(_git_client, connection)

        thread = GitPullRequestCommentThread(
            comments=[Comment(content=req.content)],
            thread_context=build_thread_context(req.file_path, req.line_number),
        )

        new_thread = await asyncio.to_thread(
            git.create_thread, thread, req.repository_id, req.pull_request_id, project=req.project_id
        )

        if not new_thread:
            raise RuntimeError("Failed to create comment thread")

        logger.debug("Successfully created PR comment thread", component="API")
        return new_thread


async def reply_to_pr_comment(connection: Connection, req: ReplyToPRCommentRequest) -> Comment:
    logger = get_logger()
    with operation_context("create PR comment reply"):
        logger.debug("Attempting to reply to PR comment...", component="API")
        git = await asyncio.to_thread(_git_client, connection)

        comment = Comment(content=req.content, comment_type=COMMENT_TYPE_TEXT)
        created = await asyncio.to_thread(
            git.create_comment,
            comment,
            req.repository_id,
            req.pull_request_id,
            req.thread_id,
            project=req.project_id,
        )

        if not created:
            raise RuntimeError("Failed to create reply in thread")

        logger.debug("Successfully created PR comment reply", component="API")
        return created


def parse_iteration_number(value: str | None) -> int | None:
    """Parse the compareTo argument; an empty value means "no comparison".

    Raises:
        AzureDevOpsError: VALIDATION kind if the value is not an integer
    """
    if not value:
        return None
    try:
        return int(value.strip())
    except ValueError:
        raise validation_error(
            f"compareTo must be an iteration number, got {value!r}", compare_to=value
        ) from None


async def get_pr_files(connection: Connection, req: GetPRFilesRequest) -> list[GitPullRequestChange]:
    """List the files changed in the latest iteration of a pull request.

    The latest iteration is the last one returned by the provider. Returns an
    empty list when the pull request has no iterations or no changes.
    """
    compare_to = parse_iteration_number(req.compare_to)

    with operation_context("get PR files"):
        git = await asyncio.to_thread(_git_client, connection)
        iterations = await asyncio.to_thread(
            git.get_pull_request_iterations,
            req.repository_id,
            req.pull_request_id,
            project=req.project_id,
        )

        if not iterations:
            return []

        latest = iterations[-1]
        if not latest.id:
            raise RuntimeError("Latest iteration ID is missing")

        changes = await asyncio.to_thread(
            git.get_pull_request_iteration_changes,
            req.repository_id,
            req.pull_request_id,
            latest.id,
            project=req.project_id,
            compare_to=compare_to,
        )

        if not changes or not changes.change_entries:
            return []

        return list(changes.change_entries)
