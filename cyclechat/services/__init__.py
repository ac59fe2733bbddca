"""Services d'accès au backend CycleChat."""

from cyclechat.services.auth_api import AuthGateway
from cyclechat.services.errors import (
    AuthError,
    HttpError,
    NetworkError,
    ProtocolError,
    ServerError,
    ServiceError,
    SessionBusyError,
    ValidationError,
)
from cyclechat.services.http_client import (
    ApiClient,
    BearerTokenMiddleware,
    RequestOptions,
    UnauthorizedMiddleware,
)
from cyclechat.services.message_api import MessageGateway
from cyclechat.services.message_board import MessageBoard
from cyclechat.services.session import SessionManager
from cyclechat.services.status_poller import ServerStatusPoller

__all__ = [
    "ApiClient",
    "AuthError",
    "AuthGateway",
    "BearerTokenMiddleware",
    "HttpError",
    "MessageBoard",
    "MessageGateway",
    "NetworkError",
    "ProtocolError",
    "RequestOptions",
    "ServerError",
    "ServerStatusPoller",
    "ServiceError",
    "SessionBusyError",
    "SessionManager",
    "UnauthorizedMiddleware",
    "ValidationError",
]
