"""CLI entry point for the Azure DevOps MCP server."""

import asyncio
import sys

import click

from azure_devops_mcp import __version__
from azure_devops_mcp.config import ORG_URL_ENV, PAT_ENV, AuthMethod, AzureDevOpsConfig
from azure_devops_mcp.connection import check_connection, validate_config
from azure_devops_mcp.errors import AzureDevOpsError, format_error
from azure_devops_mcp.mcp_server import run_server
from azure_devops_mcp.utils.logging import init_logger


def connection_options(func):
    """Options shared by every command that talks to Azure DevOps."""
    func = click.option(
        "--verbose", "-v", is_flag=True, default=False, help="Print debug output to stderr"
    )(func)
    func = click.option(
        "--pat",
        envvar=PAT_ENV,
        default=None,
        help=f"Personal access token (default: ${PAT_ENV})",
    )(func)
    func = click.option(
        "--org-url",
        envvar=ORG_URL_ENV,
        default=None,
        help=f"Organization URL, e.g. https://dev.azure.com/contoso (default: ${ORG_URL_ENV})",
    )(func)
    return func


def build_config(org_url: str | None, pat: str | None) -> AzureDevOpsConfig:
    """Build and validate the configuration, exiting with code 1 if unusable."""
    config = AzureDevOpsConfig(
        organization_url=org_url,
        auth_method=AuthMethod.PAT,
        personal_access_token=pat,
    )
    try:
        validate_config(config)
    except AzureDevOpsError as e:
        click.echo(format_error(e), err=True)
        click.echo(f"  -> Set --org-url/--pat or ${ORG_URL_ENV}/${PAT_ENV}", err=True)
        sys.exit(1)
    return config


@click.group()
@click.version_option(version=__version__, prog_name="azure-devops-mcp")
def cli():
    """Azure DevOps tools over the Model Context Protocol."""
    pass


@cli.command()
@connection_options
def serve(org_url: str | None, pat: str | None, verbose: bool):
    """Run the MCP server on stdio."""
    init_logger(verbose=verbose)
    config = build_config(org_url, pat)
    run_server(config)


@cli.command()
@connection_options
def check(org_url: str | None, pat: str | None, verbose: bool):
    """Verify that the organization is reachable with the given credentials.

    Exit codes: 0 = connected, 1 = bad configuration or connection failed
    """
    init_logger(verbose=verbose)
    config = build_config(org_url, pat)
    if not asyncio.run(check_connection(config)):
        sys.exit(1)
    click.echo(f"Connected to {config.organization_url}")


def main():
    cli()


if __name__ == "__main__":
    main()
