"""Authenticated connections to Azure DevOps.

A connection is opened for every tool call and never cached. Opening one also
performs a cheap authenticated request, so bad credentials surface as an
AUTHENTICATION error before the operation runs.
"""

import asyncio

from azure.devops.connection import Connection
from msrest.authentication import BasicAuthentication

from azure_devops_mcp.config import AuthMethod, AzureDevOpsConfig
from azure_devops_mcp.errors import authentication_error, validation_error
from azure_devops_mcp.utils.logging import get_logger


def validate_config(config: AzureDevOpsConfig) -> None:
    """Check that the configuration can be used to connect.

    Raises:
        AzureDevOpsError: VALIDATION kind if the organization URL is missing,
            or PAT auth is selected without a token
    """
    if not config.organization_url:
        raise validation_error("Organization URL is required")

    if config.auth_method is AuthMethod.PAT and not config.personal_access_token:
        raise validation_error("Personal Access Token is required for PAT authentication")


def _connect(config: AzureDevOpsConfig) -> Connection:
    # The PAT travels as the password of a basic-auth pair with an empty user
    credentials = BasicAuthentication("", config.personal_access_token)
    connection = Connection(base_url=config.organization_url, creds=credentials)
    connection.clients.get_core_client().get_projects(top=1)
    return connection


async def get_connection(config: AzureDevOpsConfig) -> Connection:
    """Open and verify a connection to the configured organization.

    Raises:
        AzureDevOpsError: AUTHENTICATION kind if the connection cannot be
            established or the credentials are rejected
    """
    try:
        return await asyncio.to_thread(_connect, config)
    except Exception as e:
        get_logger().error(f"Connection error details: {e}")
        raise authentication_error(f"Failed to authenticate with Azure DevOps: {e}") from e


async def check_connection(config: AzureDevOpsConfig) -> bool:
    """Return True if a connection to the organization can be opened."""
    logger = get_logger()
    logger.info(f"Testing connection to {config.organization_url}...")
    try:
        await get_connection(config)
    except Exception:
        logger.warning("Connection test failed")
        return False
    logger.info("Connection successful")
    return True
