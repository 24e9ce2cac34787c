"""Shared fixtures: SDK model factories and a mocked Azure DevOps connection."""

from unittest.mock import MagicMock

import pytest
from azure.devops.v7_1.git.models import (
    Comment,
    CommentPosition,
    CommentThreadContext,
    GitPullRequestCommentThread,
    IdentityRef,
)

from azure_devops_mcp import mcp_server
from azure_devops_mcp.config import AzureDevOpsConfig
from azure_devops_mcp.utils import logging as server_logging


@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch: pytest.MonkeyPatch):
    """Give every test a fresh non-verbose logger."""
    monkeypatch.setattr(server_logging, "_logger", None)


@pytest.fixture(autouse=True)
def server_config():
    """Configure the dispatcher with a dummy organization."""
    config = AzureDevOpsConfig(
        organization_url="https://dev.azure.com/contoso",
        personal_access_token="dummy-pat",
    )
    mcp_server.configure(config)
    yield config
    mcp_server.configure(None)


@pytest.fixture
def git_client() -> MagicMock:
    return MagicMock(name="GitClient")


@pytest.fixture
def core_client() -> MagicMock:
    return MagicMock(name="CoreClient")


@pytest.fixture
def connection(git_client: MagicMock, core_client: MagicMock) -> MagicMock:
    """Connection whose clients hand out the mocked git and core clients."""
    conn = MagicMock(name="Connection")
    conn.clients.get_git_client.return_value = git_client
    conn.clients.get_core_client.return_value = core_client
    return conn


@pytest.fixture
def make_comment():
    """Factory for SDK comments."""

    def _make(
        comment_id: int | None,
        content: str | None = "Comment text",
        author: str | None = "User1",
        parent_id: int | None = None,
    ) -> Comment:
        return Comment(
            id=comment_id,
            content=content,
            author=IdentityRef(display_name=author) if author is not None else None,
            parent_comment_id=parent_id,
        )

    return _make


@pytest.fixture
def make_thread():
    """Factory for SDK comment threads anchored to a file."""

    def _make(
        comments: list[Comment],
        thread_id: object = 1,
        status: object = "active",
        file_path: str | None = "/src/test.ts",
        start: tuple[int, int] | None = None,
        end: tuple[int, int] | None = None,
        with_context: bool = True,
    ) -> GitPullRequestCommentThread:
        context = None
        if with_context:
            context = CommentThreadContext(
                file_path=file_path,
                right_file_start=CommentPosition(line=start[0], offset=start[1]) if start else None,
                right_file_end=CommentPosition(line=end[0], offset=end[1]) if end else None,
            )
        return GitPullRequestCommentThread(
            id=thread_id,
            status=status,
            thread_context=context,
            comments=comments,
        )

    return _make
