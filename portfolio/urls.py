"""
Absolute URL helpers.
"""
from typing import Optional

from portfolio.config import DeploymentEnv

DEFAULT_BASE_URL = "http://localhost:3000"


def get_base_url(env: Optional[DeploymentEnv] = None) -> str:
    """
    Base URL of the deployment.

    On the hosting platform ``VERCEL_URL`` holds the bare host name of the
    current deployment; locally it is unset and the development server URL
    is used.

    Args:
        env: Deployment variables, read from the environment when omitted

    Returns:
        str: Base URL without a trailing slash
    """
    env = env or DeploymentEnv()
    if env.vercel_url:
        return f"https://{env.vercel_url}"
    return DEFAULT_BASE_URL
