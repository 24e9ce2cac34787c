"""Server configuration loaded from the environment."""

import os
from enum import Enum

from pydantic import BaseModel, Field

ORG_URL_ENV = "AZURE_DEVOPS_ORG_URL"
AUTH_METHOD_ENV = "AZURE_DEVOPS_AUTH_METHOD"
PAT_ENV = "AZURE_DEVOPS_PAT"


class AuthMethod(str, Enum):
    """How the server authenticates against Azure DevOps."""

    PAT = "pat"


class AzureDevOpsConfig(BaseModel):
    """Connection settings for one Azure DevOps organization."""

    organization_url: str | None = Field(
        default=None, description="Organization URL, e.g. https://dev.azure.com/contoso"
    )
    auth_method: AuthMethod = Field(default=AuthMethod.PAT)
    personal_access_token: str | None = Field(default=None, repr=False)


def load_config(environ: dict[str, str] | None = None) -> AzureDevOpsConfig:
    """Build the configuration from environment variables.

    Missing values stay None; ``validate_config`` decides whether they are
    required.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Raises:
        ValueError: If AZURE_DEVOPS_AUTH_METHOD names an unsupported method
    """
    env = os.environ if environ is None else environ
    auth_method = env.get(AUTH_METHOD_ENV) or AuthMethod.PAT.value
    return AzureDevOpsConfig(
        organization_url=env.get(ORG_URL_ENV) or None,
        auth_method=AuthMethod(auth_method.lower()),
        personal_access_token=env.get(PAT_ENV) or None,
    )
