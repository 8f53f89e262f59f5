"""Python client for the Bags token-launch API.

Security notes:
- The API key grants launch rights on the account; keep it out of logs.
"""

from bagsfm._version import __version__
from bagsfm.client.config import ClientConfig
from bagsfm.client.service import BagsClient
from bagsfm.errors import (
    BagsAPIError,
    BagsError,
    ConfigurationError,
    DecodeError,
    HTTPStatusError,
    UnexpectedResponseError,
    ValidationError,
)
from bagsfm.models import (
    WSOL_MINT,
    CreateFeeShareConfigRequest,
    CreateLaunchConfigRequest,
    CreateLaunchTransactionRequest,
    CreateTokenInfoRequest,
    FeeShareConfig,
    LaunchConfig,
    TokenCreator,
    TokenInfo,
    TokenLaunch,
)

__all__ = [
    "BagsAPIError",
    "BagsClient",
    "BagsError",
    "ClientConfig",
    "ConfigurationError",
    "CreateFeeShareConfigRequest",
    "CreateLaunchConfigRequest",
    "CreateLaunchTransactionRequest",
    "CreateTokenInfoRequest",
    "DecodeError",
    "FeeShareConfig",
    "HTTPStatusError",
    "LaunchConfig",
    "TokenCreator",
    "TokenInfo",
    "TokenLaunch",
    "UnexpectedResponseError",
    "ValidationError",
    "WSOL_MINT",
    "__version__",
]
