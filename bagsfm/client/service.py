from __future__ import annotations

import mimetypes
import os
from typing import List, Optional

from bagsfm.client.config import ClientConfig
from bagsfm.client.http import BagsHttpClient
from bagsfm.client.transport import Transport
from bagsfm.endpoints import analytics, fee_share, system, token_launch
from bagsfm.models import (
    CreateFeeShareConfigRequest,
    CreateLaunchConfigRequest,
    CreateLaunchTransactionRequest,
    CreateTokenInfoRequest,
    FeeShareConfig,
    LaunchConfig,
    TokenCreator,
    TokenInfo,
)


class BagsClient:
    """Typed client for the Bags token-launch API.

    Holds an immutable ClientConfig and a transport; every method is one API
    call. Methods accept ``timeout`` (seconds) to override the configured
    default for that call.

    Example:
      client = BagsClient("my-api-key")
      wallet = client.get_fee_share_wallet("alice123")

    Security notes:
    - No retries are performed; the API allows roughly 1000 requests/hour and
      rate limiting is left to the caller.

    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
    ):
        if config is None:
            config = ClientConfig.from_env(api_key=api_key)
        self.http = BagsHttpClient(config, transport)

    @property
    def config(self) -> ClientConfig:
        return self.http.config

    def ping(self, *, timeout: Optional[float] = None) -> None:
        system.ping(self.http, timeout=timeout)

    # analytics

    def get_token_lifetime_fees(self, token_mint: str, *, timeout: Optional[float] = None) -> str:
        return analytics.get_token_lifetime_fees(self.http, token_mint, timeout=timeout)

    def get_token_launch_creators(
        self, token_mint: str, *, timeout: Optional[float] = None
    ) -> List[TokenCreator]:
        return analytics.get_token_launch_creators(self.http, token_mint, timeout=timeout)

    # fee share

    def get_fee_share_wallet(
        self, twitter_username: str, *, timeout: Optional[float] = None
    ) -> str:
        return fee_share.get_fee_share_wallet(self.http, twitter_username, timeout=timeout)

    def create_fee_share_config(
        self, req: CreateFeeShareConfigRequest, *, timeout: Optional[float] = None
    ) -> FeeShareConfig:
        return fee_share.create_fee_share_config(self.http, req, timeout=timeout)

    # token launch

    def create_token_info_and_metadata(
        self,
        req: CreateTokenInfoRequest,
        *,
        image_path: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> TokenInfo:
        """Upload token metadata and image.

        The image comes either from ``req.image`` (an open binary stream) or
        from ``image_path``; in the latter case filename and MIME type are
        derived from the path unless set on the request.
        """

        if image_path is None:
            return token_launch.create_token_info_and_metadata(self.http, req, timeout=timeout)

        filename = req.image_filename or os.path.basename(image_path)
        mime = req.image_mime_type or mimetypes.guess_type(filename)[0] or ""
        with open(image_path, "rb") as f:
            req = req.model_copy(
                update={"image": f, "image_filename": filename, "image_mime_type": mime}
            )
            return token_launch.create_token_info_and_metadata(self.http, req, timeout=timeout)

    def create_token_launch_config(
        self, req: CreateLaunchConfigRequest, *, timeout: Optional[float] = None
    ) -> LaunchConfig:
        return token_launch.create_token_launch_config(self.http, req, timeout=timeout)

    def create_token_launch_transaction(
        self, req: CreateLaunchTransactionRequest, *, timeout: Optional[float] = None
    ) -> str:
        return token_launch.create_token_launch_transaction(self.http, req, timeout=timeout)
