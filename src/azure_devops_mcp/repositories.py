"""Git repository operations."""

import asyncio

from azure.devops.connection import Connection
from azure.devops.v7_1.git.models import GitRepository

from azure_devops_mcp.errors import operation_context, resource_not_found
from azure_devops_mcp.schemas import GetRepositoryRequest, ListRepositoriesRequest


async def list_repositories(connection: Connection, req: ListRepositoriesRequest) -> list[GitRepository]:
    with operation_context("list repositories"):
        git = await asyncio.to_thread(connection.clients.get_git_client)
        repositories = await asyncio.to_thread(
            git.get_repositories, project=req.project_id, include_links=req.include_links
        )
        return list(repositories or [])


async def get_repository(connection: Connection, req: GetRepositoryRequest) -> GitRepository:
    with operation_context("get repository"):
        git = await asyncio.to_thread(connection.clients.get_git_client)
        repository = await asyncio.to_thread(
            git.get_repository, req.repository_id, project=req.project_id
        )

        if not repository:
            raise resource_not_found(
                f"Repository {req.repository_id} not found in project {req.project_id}",
                repository_id=req.repository_id,
                project_id=req.project_id,
            )

        return repository
