"""Shared API dependencies for the counter service and admin access."""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.requests import HTTPConnection
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from waitlist_stage.core.settings import Settings
from waitlist_stage.services.counter import CounterService

# Bearer scheme for the administrative listing; optional so an unset token
# leaves the endpoint open.
bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(connection: HTTPConnection) -> Settings:
    """Return the settings the running application was built with."""
    return connection.app.state.settings


def get_counter_service(connection: HTTPConnection) -> CounterService:
    """Return the counter service owned by the running application.

    Raises:
        HTTPException: If the application has not finished starting up
    """
    service: CounterService | None = getattr(connection.app.state, "counter_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Counter service is not running",
        )
    return service


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
CounterServiceDep = Annotated[CounterService, Depends(get_counter_service)]


def require_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    config: SettingsDep,
) -> None:
    """Check the bearer token against ``ADMIN_TOKEN`` when one is configured.

    Raises:
        HTTPException: If a token is configured and the request lacks it
    """
    if not config.admin_token:
        return
    if credentials is None or not secrets.compare_digest(
        credentials.credentials.encode(), config.admin_token.encode()
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
