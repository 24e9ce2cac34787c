"""Tests for pull request operations against a mocked git client."""

from unittest.mock import MagicMock

import pytest
from azure.devops.v7_1.git.models import (
    GitPullRequest,
    GitPullRequestChange,
    GitPullRequestIteration,
    GitPullRequestIterationChanges,
)

from azure_devops_mcp import pullrequests
from azure_devops_mcp.errors import AzureDevOpsError, ErrorKind
from azure_devops_mcp.schemas import (
    CreatePRCommentRequest,
    GetPRFilesRequest,
    GetPullRequestRequest,
    ListPRCommentsRequest,
    ListPullRequestsRequest,
    ReplyToPRCommentRequest,
    UpdatePRCommentRequest,
    UpdatePRThreadStatusRequest,
)


# ============================================================================
# get_pull_request / list_pull_requests
# ============================================================================


class TestGetPullRequest:
    @pytest.mark.asyncio
    async def test_returns_pull_request(self, connection, git_client):
        pr = GitPullRequest(pull_request_id=42, title="Add feature")
        git_client.get_pull_request.return_value = pr

        req = GetPullRequestRequest(repository_id="repo", pull_request_id=42, project_id="proj")
        result = await pullrequests.get_pull_request(connection, req)

        assert result is pr
        git_client.get_pull_request.assert_called_once_with("repo", 42, project="proj")

    @pytest.mark.asyncio
    async def test_not_found_names_id_and_repository(self, connection, git_client):
        git_client.get_pull_request.return_value = None

        req = GetPullRequestRequest(repository_id="my-repo", pull_request_id=999, project_id="proj")
        with pytest.raises(AzureDevOpsError) as exc_info:
            await pullrequests.get_pull_request(connection, req)

        error = exc_info.value
        assert error.kind is ErrorKind.RESOURCE_NOT_FOUND
        assert "999" in error.message
        assert "my-repo" in error.message

    @pytest.mark.asyncio
    async def test_provider_failure_is_wrapped(self, connection, git_client):
        git_client.get_pull_request.side_effect = RuntimeError("boom")

        req = GetPullRequestRequest(repository_id="repo", pull_request_id=1, project_id="proj")
        with pytest.raises(AzureDevOpsError) as exc_info:
            await pullrequests.get_pull_request(connection, req)

        assert exc_info.value.kind is ErrorKind.OPERATION_FAILED
        assert exc_info.value.message == "Failed to get pull request: boom"
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestListPullRequests:
    @pytest.mark.asyncio
    async def test_builds_search_criteria(self, connection, git_client):
        git_client.get_pull_requests.return_value = [GitPullRequest(pull_request_id=1)]

        req = ListPullRequestsRequest(
            repository_id="repo",
            project_id="proj",
            status="active",
            creator_id="creator",
            target_ref_name="refs/heads/main",
        )
        result = await pullrequests.list_pull_requests(connection, req)

        assert [pr.pull_request_id for pr in result] == [1]
        args, kwargs = git_client.get_pull_requests.call_args
        criteria = args[1]
        assert args[0] == "repo"
        assert kwargs == {"project": "proj"}
        assert criteria.status == "active"
        assert criteria.creator_id == "creator"
        assert criteria.target_ref_name == "refs/heads/main"
        assert criteria.reviewer_id is None

    @pytest.mark.asyncio
    async def test_status_is_optional(self, connection, git_client):
        git_client.get_pull_requests.return_value = None

        req = ListPullRequestsRequest(repository_id="repo", project_id="proj")
        result = await pullrequests.list_pull_requests(connection, req)

        assert result == []
        assert git_client.get_pull_requests.call_args.args[1].status is None

    @pytest.mark.asyncio
    async def test_provider_failure_is_wrapped(self, connection, git_client):
        git_client.get_pull_requests.side_effect = RuntimeError("timeout")

        req = ListPullRequestsRequest(repository_id="repo", project_id="proj")
        with pytest.raises(AzureDevOpsError, match="Failed to list pull requests: timeout"):
            await pullrequests.list_pull_requests(connection, req)


# ============================================================================
# Comments
# ============================================================================


class TestListPRComments:
    @pytest.mark.asyncio
    async def test_reconstructs_threads(self, connection, git_client, make_thread, make_comment):
        git_client.get_threads.return_value = [
            make_thread([make_comment(1), make_comment(2, parent_id=1)], thread_id=5),
            make_thread([make_comment(1)], thread_id=6, with_context=False),
        ]

        req = ListPRCommentsRequest(repository_id="repo", pull_request_id=7, project_id="proj")
        result = await pullrequests.list_pr_comments(connection, req)

        assert [c.thread_id for c in result] == [5]
        assert result[0].replies[0].comment_id == 2
        git_client.get_threads.assert_called_once_with("repo", 7, project="proj")

    @pytest.mark.asyncio
    async def test_provider_failure_is_wrapped(self, connection, git_client):
        git_client.get_threads.side_effect = RuntimeError("Network error")

        req = ListPRCommentsRequest(repository_id="repo", pull_request_id=7, project_id="proj")
        with pytest.raises(AzureDevOpsError) as exc_info:
            await pullrequests.list_pr_comments(connection, req)

        assert exc_info.value.message == "Failed to list PR comments: Network error"


class TestUpdatePRComment:
    @pytest.mark.asyncio
    async def test_sends_new_content(self, connection, git_client, make_comment):
        updated = make_comment(3, content="edited")
        git_client.update_comment.return_value = updated

        req = UpdatePRCommentRequest(
            repository_id="repo",
            pull_request_id=7,
            thread_id=2,
            comment_id=3,
            content="edited",
            project_id="proj",
        )
        result = await pullrequests.update_pr_comment(connection, req)

        assert result is updated
        args, kwargs = git_client.update_comment.call_args
        assert args[0].content == "edited"
        assert args[1:] == ("repo", 7, 2, 3)
        assert kwargs == {"project": "proj"}

    @pytest.mark.asyncio
    async def test_not_found(self, connection, git_client):
        git_client.update_comment.return_value = None

        req = UpdatePRCommentRequest(
            repository_id="repo",
            pull_request_id=7,
            thread_id=2,
            comment_id=3,
            content="edited",
            project_id="proj",
        )
        with pytest.raises(AzureDevOpsError) as exc_info:
            await pullrequests.update_pr_comment(connection, req)

        assert exc_info.value.kind is ErrorKind.RESOURCE_NOT_FOUND
        assert exc_info.value.message == "Comment 3 not found in thread 2"


class TestUpdatePRThreadStatus:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,wire_name",
        [("Active", "active"), ("Fixed", "fixed"), ("WontFix", "wontFix"), ("ByDesign", "byDesign")],
    )
    async def test_sends_wire_status(self, connection, git_client, status, wire_name):
        git_client.update_thread.return_value = MagicMock(name="Thread")

        req = UpdatePRThreadStatusRequest(
            repository_id="repo", pull_request_id=7, thread_id=2, status=status, project_id="proj"
        )
        await pullrequests.update_pr_thread_status(connection, req)

        args, kwargs = git_client.update_thread.call_args
        assert args[0].status == wire_name
        assert args[1:] == ("repo", 7, 2)
        assert kwargs == {"project": "proj"}

    @pytest.mark.asyncio
    async def test_not_found(self, connection, git_client):
        git_client.update_thread.return_value = None

        req = UpdatePRThreadStatusRequest(
            repository_id="repo", pull_request_id=7, thread_id=2, status="Closed", project_id="proj"
        )
        with pytest.raises(AzureDevOpsError) as exc_info:
            await pullrequests.update_pr_thread_status(connection, req)

        assert exc_info.value.kind is ErrorKind.RESOURCE_NOT_FOUND
        assert "Thread 2" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_provider_failure_is_wrapped(self, connection, git_client):
        git_client.update_thread.side_effect = RuntimeError("denied")

        req = UpdatePRThreadStatusRequest(
            repository_id="repo", pull_request_id=7, thread_id=2, status="Closed", project_id="proj"
        )
        with pytest.raises(AzureDevOpsError, match="Failed to update thread status: denied"):
            await pullrequests.update_pr_thread_status(connection, req)


class TestBuildThreadContext:
    def test_anchors_to_line(self):
        context = pullrequests.build_thread_context("/src/app.py", 10)

        assert context.file_path == "/src/app.py"
        for position in (context.right_file_start, context.right_file_end):
            assert position.line == 10
            assert position.offset == 1

    def test_defaults_to_line_one(self):
        context = pullrequests.build_thread_context("/src/app.py", None)

        assert context.right_file_start.line == 1
        assert context.right_file_end.line == 1

    @pytest.mark.parametrize("file_path", [None, ""])
    def test_no_file_means_no_context(self, file_path):
        assert pullrequests.build_thread_context(file_path, 10) is None


class TestCreatePRComment:
    @pytest.mark.asyncio
    async def test_creates_anchored_thread(self, connection, git_client):
        created = MagicMock(name="Thread")
        git_client.create_thread.return_value = created

        req = CreatePRCommentRequest(
            repository_id="repo",
            pull_request_id=7,
            content="Please rename",
            project_id="proj",
            file_path="/src/app.py",
            line_number=10,
        )
        result = await pullrequests.create_pr_comment(connection, req)

        assert result is created
        args, kwargs = git_client.create_thread.call_args
        thread = args[0]
        assert [c.content for c in thread.comments] == ["Please rename"]
        assert thread.thread_context.file_path == "/src/app.py"
        assert thread.thread_context.right_file_start.line == 10
        assert thread.thread_context.right_file_end.offset == 1
        assert args[1:] == ("repo", 7)
        assert kwargs == {"project": "proj"}

    @pytest.mark.asyncio
    async def test_pull_request_level_thread(self, connection, git_client):
        git_client.create_thread.return_value = MagicMock(name="Thread")

        req = CreatePRCommentRequest(
            repository_id="repo", pull_request_id=7, content="LGTM", project_id="proj"
        )
        await pullrequests.create_pr_comment(connection, req)

        assert git_client.create_thread.call_args.args[0].thread_context is None

    @pytest.mark.asyncio
    async def test_empty_result_is_failure(self, connection, git_client):
        git_client.create_thread.return_value = None

        req = CreatePRCommentRequest(
            repository_id="repo", pull_request_id=7, content="LGTM", project_id="proj"
        )
        with pytest.raises(AzureDevOpsError) as exc_info:
            await pullrequests.create_pr_comment(connection, req)

        assert exc_info.value.kind is ErrorKind.OPERATION_FAILED
        assert exc_info.value.message == "Failed to create PR comment: Failed to create comment thread"


class TestReplyToPRComment:
    @pytest.mark.asyncio
    async def test_sends_text_comment(self, connection, git_client, make_comment):
        reply = make_comment(4, content="Done", parent_id=None)
        git_client.create_comment.return_value = reply

        req = ReplyToPRCommentRequest(
            repository_id="repo", pull_request_id=7, thread_id=2, content="Done", project_id="proj"
        )
        result = await pullrequests.reply_to_pr_comment(connection, req)

        assert result is reply
        args, kwargs = git_client.create_comment.call_args
        assert args[0].content == "Done"
        assert args[0].comment_type == "text"
        assert args[1:] == ("repo", 7, 2)
        assert kwargs == {"project": "proj"}

    @pytest.mark.asyncio
    async def test_empty_result_is_failure(self, connection, git_client):
        git_client.create_comment.return_value = None

        req = ReplyToPRCommentRequest(
            repository_id="repo", pull_request_id=7, thread_id=2, content="Done", project_id="proj"
        )
        with pytest.raises(AzureDevOpsError, match="Failed to create PR comment reply"):
            await pullrequests.reply_to_pr_comment(connection, req)


# ============================================================================
# Files
# ============================================================================


class TestParseIterationNumber:
    @pytest.mark.parametrize("value,expected", [(None, None), ("", None), ("3", 3), (" 12 ", 12)])
    def test_valid_values(self, value, expected):
        assert pullrequests.parse_iteration_number(value) == expected

    @pytest.mark.parametrize("value", ["latest", "1.5", "abc"])
    def test_rejects_non_integers(self, value):
        with pytest.raises(AzureDevOpsError) as exc_info:
            pullrequests.parse_iteration_number(value)
        assert exc_info.value.kind is ErrorKind.VALIDATION


class TestGetPRFiles:
    @pytest.mark.asyncio
    async def test_uses_last_iteration(self, connection, git_client):
        git_client.get_pull_request_iterations.return_value = [
            GitPullRequestIteration(id=1),
            GitPullRequestIteration(id=2),
            GitPullRequestIteration(id=3),
        ]
        entries = [GitPullRequestChange(change_tracking_id=1), GitPullRequestChange(change_tracking_id=2)]
        git_client.get_pull_request_iteration_changes.return_value = GitPullRequestIterationChanges(
            change_entries=entries
        )

        req = GetPRFilesRequest(repository_id="repo", pull_request_id=7, project_id="proj", compare_to="1")
        result = await pullrequests.get_pr_files(connection, req)

        assert result == entries
        git_client.get_pull_request_iteration_changes.assert_called_once_with(
            "repo", 7, 3, project="proj", compare_to=1
        )

    @pytest.mark.asyncio
    async def test_no_iterations(self, connection, git_client):
        git_client.get_pull_request_iterations.return_value = []

        req = GetPRFilesRequest(repository_id="repo", pull_request_id=7, project_id="proj")
        assert await pullrequests.get_pr_files(connection, req) == []
        git_client.get_pull_request_iteration_changes.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("changes", [None, GitPullRequestIterationChanges(change_entries=None)])
    async def test_no_changes(self, connection, git_client, changes):
        git_client.get_pull_request_iterations.return_value = [GitPullRequestIteration(id=1)]
        git_client.get_pull_request_iteration_changes.return_value = changes

        req = GetPRFilesRequest(repository_id="repo", pull_request_id=7, project_id="proj")
        assert await pullrequests.get_pr_files(connection, req) == []

    @pytest.mark.asyncio
    async def test_without_compare_to(self, connection, git_client):
        git_client.get_pull_request_iterations.return_value = [GitPullRequestIteration(id=2)]
        git_client.get_pull_request_iteration_changes.return_value = None

        req = GetPRFilesRequest(repository_id="repo", pull_request_id=7, project_id="proj")
        await pullrequests.get_pr_files(connection, req)

        assert git_client.get_pull_request_iteration_changes.call_args.kwargs["compare_to"] is None

    @pytest.mark.asyncio
    async def test_latest_iteration_without_id(self, connection, git_client):
        git_client.get_pull_request_iterations.return_value = [GitPullRequestIteration(id=None)]

        req = GetPRFilesRequest(repository_id="repo", pull_request_id=7, project_id="proj")
        with pytest.raises(AzureDevOpsError) as exc_info:
            await pullrequests.get_pr_files(connection, req)

        assert exc_info.value.message == "Failed to get PR files: Latest iteration ID is missing"

    @pytest.mark.asyncio
    async def test_bad_compare_to_fails_before_any_request(self, connection, git_client):
        req = GetPRFilesRequest(
            repository_id="repo", pull_request_id=7, project_id="proj", compare_to="latest"
        )
        with pytest.raises(AzureDevOpsError) as exc_info:
            await pullrequests.get_pr_files(connection, req)

        assert exc_info.value.kind is ErrorKind.VALIDATION
        git_client.get_pull_request_iterations.assert_not_called()
