"""
Control API authentication using a Bearer token.

The expected token comes from the apiToken setting (or MONITOR_API_TOKEN),
stored on app.state by create_app().
"""

from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

security = HTTPBearer()


def verify_pipeline_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> str:
    """
    Verify the bearer token matches the configured control token.

    Raises:
        HTTPException: If no token is configured, or the token is invalid
    """
    api_token = getattr(request.app.state, "api_token", None)
    if not api_token:
        raise HTTPException(
            status_code=500,
            detail="Server misconfigured: MONITOR_API_TOKEN not set",
        )

    if credentials.credentials != api_token:
        raise HTTPException(
            status_code=401,
            detail="Invalid pipeline authentication token",
        )

    return credentials.credentials
