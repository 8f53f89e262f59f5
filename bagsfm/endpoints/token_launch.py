"""Token launch endpoints.

A launch runs in three steps:

1. ``create_token_info_and_metadata`` uploads name/symbol/socials and the
   image, returning the token mint and the IPFS metadata URI.
2. ``create_token_launch_config`` returns a config transaction and key for the
   launch wallet.
3. ``create_token_launch_transaction`` returns the base64 launch transaction
   for the caller to sign and submit.

"""

from __future__ import annotations

from typing import Optional

from bagsfm.client.http import BagsHttpClient
from bagsfm.client.multipart import MultipartUpload
from bagsfm.endpoints.base import require, unwrap_model, unwrap_str
from bagsfm.errors import ValidationError
from bagsfm.models import (
    CreateLaunchConfigRequest,
    CreateLaunchTransactionRequest,
    CreateTokenInfoRequest,
    LaunchConfig,
    TokenInfo,
)

IMAGE_FIELD = "image"


def create_token_info_and_metadata(
    http: BagsHttpClient,
    req: CreateTokenInfoRequest,
    *,
    timeout: Optional[float] = None,
) -> TokenInfo:
    """Upload token metadata and image.

    POST token-launch/create-token-info (multipart/form-data)

    The image is streamed from ``req.image``; blank optional fields are not
    sent.
    """

    if req is None:
        raise ValidationError("request is required")
    require(name=req.name, symbol=req.symbol)
    if req.image is None or not (req.image_filename or "").strip():
        raise ValidationError("image and image filename are required")

    upload = MultipartUpload(
        fields=req.form_fields(),
        file_field=IMAGE_FIELD,
        filename=req.image_filename,
        source=req.image,
        content_type=req.image_mime_type,
    )
    data = http.post_multipart("token-launch/create-token-info", upload, timeout=timeout)
    return unwrap_model(data, TokenInfo)


def create_token_launch_config(
    http: BagsHttpClient,
    req: CreateLaunchConfigRequest,
    *,
    timeout: Optional[float] = None,
) -> LaunchConfig:
    """POST token-launch/create-config"""

    if req is None:
        raise ValidationError("launchWallet is required")
    require(launchWallet=req.launch_wallet)
    data = http.post_json("token-launch/create-config", req, timeout=timeout)
    return unwrap_model(data, LaunchConfig)


def create_token_launch_transaction(
    http: BagsHttpClient,
    req: CreateLaunchTransactionRequest,
    *,
    timeout: Optional[float] = None,
) -> str:
    """Build the launch transaction; returns it base64-encoded.

    POST token-launch/create-launch-transaction
    """

    if req is None:
        raise ValidationError("request is required")
    require(ipfs=req.ipfs, tokenMint=req.token_mint, wallet=req.wallet, configKey=req.config_key)
    if req.initial_buy_lamports < 0:
        raise ValidationError("initialBuyLamports must not be negative")
    data = http.post_json("token-launch/create-launch-transaction", req, timeout=timeout)
    return unwrap_str(data)
