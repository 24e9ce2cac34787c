"""Project operations."""

import asyncio

from azure.devops.connection import Connection
from azure.devops.v7_1.core.models import TeamProject, TeamProjectReference

from azure_devops_mcp.errors import operation_context, resource_not_found
from azure_devops_mcp.schemas import GetProjectRequest, ListProjectsRequest


def _core_client(connection: Connection):
    return connection.clients.get_core_client()


async def list_projects(connection: Connection, req: ListProjectsRequest) -> list[TeamProjectReference]:
    with operation_context("list projects"):
        core = await asyncio.to_thread(_core_client, connection)
        # get_projects wraps the page in a response object with .value
        response = await asyncio.to_thread(core.get_projects, top=req.top, skip=req.skip)
        return list(response.value or []) if response else []


async def get_project(connection: Connection, req: GetProjectRequest) -> TeamProject:
    with operation_context("get project"):
        core = await asyncio.to_thread(_core_client, connection)
        project = await asyncio.to_thread(
            core.get_project,
            req.project_id,
            include_capabilities=req.include_capabilities,
            include_history=req.include_history,
        )

        if not project:
            raise resource_not_found(f"Project {req.project_id} not found", project_id=req.project_id)

        return project
