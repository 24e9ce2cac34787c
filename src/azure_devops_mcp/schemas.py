"""Request and response models for the Azure DevOps tools.

Tool arguments arrive in camelCase (``repositoryId``) and are validated
strictly: a pull request id sent as the string "42" is rejected rather than
coerced. The JSON schemas advertised by ``list_tools`` are generated from
these models.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ToolRequest(BaseModel):
    """Base for tool argument models."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, strict=True)


# ============================================================================
# Pull Request Requests
# ============================================================================


class GetPullRequestRequest(ToolRequest):
    """Arguments for get_pull_request."""

    repository_id: str = Field(..., description="Repository ID or name")
    pull_request_id: int = Field(..., description="Pull request ID")
    project_id: str = Field(..., description="Project ID or name")


class ListPullRequestsRequest(ToolRequest):
    """Arguments for list_pull_requests."""

    repository_id: str = Field(..., description="Repository ID or name")
    project_id: str = Field(..., description="Project ID or name")
    status: Literal["active", "abandoned", "completed", "all"] | None = Field(
        default=None, description="Filter by pull request status"
    )
    creator_id: str | None = Field(default=None, description="Only PRs created by this identity")
    reviewer_id: str | None = Field(default=None, description="Only PRs reviewed by this identity")
    source_ref_name: str | None = Field(
        default=None, description="Source branch, e.g. refs/heads/feature"
    )
    target_ref_name: str | None = Field(
        default=None, description="Target branch, e.g. refs/heads/main"
    )
    include_links: bool | None = Field(default=None, description="Include _links in results")


class ListPRCommentsRequest(ToolRequest):
    """Arguments for list_pr_comments."""

    repository_id: str = Field(..., description="Repository ID or name")
    pull_request_id: int = Field(..., description="Pull request ID")
    project_id: str = Field(..., description="Project ID or name")


class UpdatePRCommentRequest(ToolRequest):
    """Arguments for update_pr_comment."""

    repository_id: str = Field(..., description="Repository ID or name")
    pull_request_id: int = Field(..., description="Pull request ID")
    thread_id: int = Field(..., description="Thread ID")
    comment_id: int = Field(..., description="Comment ID")
    content: str = Field(..., description="New comment content")
    project_id: str = Field(..., description="Project ID or name")


class UpdatePRThreadStatusRequest(ToolRequest):
    """Arguments for update_pr_thread_status."""

    repository_id: str = Field(..., description="Repository ID or name")
    pull_request_id: int = Field(..., description="Pull request ID")
    thread_id: int = Field(..., description="Thread ID")
    status: Literal["Unknown", "Active", "Fixed", "WontFix", "Closed", "ByDesign", "Pending"] = (
        Field(..., description="New thread status")
    )
    project_id: str = Field(..., description="Project ID or name")


class CreatePRCommentRequest(ToolRequest):
    """Arguments for create_pr_comment."""

    repository_id: str = Field(..., description="Repository ID or name")
    pull_request_id: int = Field(..., description="Pull request ID")
    content: str = Field(..., description="Comment content")
    project_id: str = Field(..., description="Project ID or name")
    file_path: str | None = Field(
        default=None, description="File to anchor the thread to (omit for a PR-level thread)"
    )
    line_number: int | None = Field(
        default=None, description="Line to anchor the thread to (requires filePath)"
    )


class ReplyToPRCommentRequest(ToolRequest):
    """Arguments for reply_to_pr_comment."""

    repository_id: str = Field(..., description="Repository ID or name")
    pull_request_id: int = Field(..., description="Pull request ID")
    thread_id: int = Field(..., description="Thread ID")
    content: str = Field(..., description="Reply content")
    project_id: str = Field(..., description="Project ID or name")


class GetPRFilesRequest(ToolRequest):
    """Arguments for get_pr_files."""

    repository_id: str = Field(..., description="Repository ID or name")
    pull_request_id: int = Field(..., description="Pull request ID")
    project_id: str = Field(..., description="Project ID or name")
    compare_to: str | None = Field(
        default=None, description="Iteration number to diff the latest iteration against"
    )


# ============================================================================
# Project and Repository Requests
# ============================================================================


class ListProjectsRequest(ToolRequest):
    """Arguments for list_projects."""

    top: int | None = Field(default=None, ge=1, description="Maximum number of projects")
    skip: int | None = Field(default=None, ge=0, description="Number of projects to skip")


class GetProjectRequest(ToolRequest):
    """Arguments for get_project."""

    project_id: str = Field(..., description="Project ID or name")
    include_capabilities: bool | None = Field(
        default=None, description="Include process and source control capabilities"
    )
    include_history: bool | None = Field(default=None, description="Include project history")


class ListRepositoriesRequest(ToolRequest):
    """Arguments for list_repositories."""

    project_id: str = Field(..., description="Project ID or name")
    include_links: bool | None = Field(default=None, description="Include _links in results")


class GetRepositoryRequest(ToolRequest):
    """Arguments for get_repository."""

    project_id: str = Field(..., description="Project ID or name")
    repository_id: str = Field(..., description="Repository ID or name")


# ============================================================================
# Responses
# ============================================================================


class CommentLocation(BaseModel):
    """Line/offset range of a thread in the right-hand (new) file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    start_line: int | None = None
    end_line: int | None = None
    start_offset: int | None = None
    end_offset: int | None = None


class ReconstructedComment(BaseModel):
    """One comment of a pull request thread with its nested replies.

    File path, location, status and thread id are thread-level values copied
    onto every comment of the thread.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_path: str
    location: CommentLocation
    content: str
    status: str
    thread_id: int
    author: str
    comment_id: int
    parent_comment_id: int = 0
    replies: list["ReconstructedComment"] = Field(default_factory=list)
