"""pwv: CyberArk PasswordVault クライアント"""

__version__ = "0.1.0"

from .approval import approve_incoming, parse_allowed_users
from .client import VaultClient
from .exceptions import (
    AuthenticationFailed,
    ConfigError,
    DecodeError,
    MalformedTimestamp,
    NotAuthenticated,
    PwvError,
    PwvErrorCodes,
    RemoteError,
    TransportError,
)
from .http_client import HttpVaultClient
from .models import (
    AccountDetails,
    AccountProperties,
    ApprovalOutcome,
    ApprovalResult,
    CredentialResult,
    IncomingRequest,
    IncomingRequestsResponse,
    MyRequest,
    MyRequestsResponse,
    VaultClientConfig,
)
from .timestamp import decode_timestamp

__all__ = [
    "VaultClient",
    "HttpVaultClient",
    "VaultClientConfig",
    "IncomingRequest",
    "IncomingRequestsResponse",
    "MyRequest",
    "MyRequestsResponse",
    "AccountDetails",
    "AccountProperties",
    "CredentialResult",
    "ApprovalOutcome",
    "ApprovalResult",
    "approve_incoming",
    "parse_allowed_users",
    "decode_timestamp",
    "PwvError",
    "PwvErrorCodes",
    "TransportError",
    "DecodeError",
    "AuthenticationFailed",
    "NotAuthenticated",
    "RemoteError",
    "MalformedTimestamp",
    "ConfigError",
]
