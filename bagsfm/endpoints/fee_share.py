"""Fee-share endpoints: wallet lookup by social handle and split configuration."""

from __future__ import annotations

from typing import Optional

from bagsfm.client.http import BagsHttpClient
from bagsfm.endpoints.base import require, unwrap_model, unwrap_str
from bagsfm.errors import ValidationError
from bagsfm.models import CreateFeeShareConfigRequest, FeeShareConfig

MAX_BPS = 10_000


def get_fee_share_wallet(
    http: BagsHttpClient, twitter_username: str, *, timeout: Optional[float] = None
) -> str:
    """Resolve the fee-share wallet address for a Twitter handle.

    GET token-launch/fee-share/wallet/twitter?twitterUsername=<handle>

    A leading ``@`` is stripped. An empty address in a successful envelope is
    reported as UnexpectedResponseError.
    """

    require(twitterUsername=twitter_username)
    handle = twitter_username.strip().lstrip("@")
    require(twitterUsername=handle)
    data = http.get(
        "token-launch/fee-share/wallet/twitter",
        query={"twitterUsername": handle},
        timeout=timeout,
    )
    return unwrap_str(data)


def validate_fee_share_config(req: CreateFeeShareConfigRequest) -> None:
    """Local checks only: required wallets and mints, each share within 0..10000 bps.

    Whether the split is acceptable as a whole is left to the API.
    """

    require(
        walletA=req.wallet_a,
        walletB=req.wallet_b,
        payer=req.payer,
        baseMint=req.base_mint,
        quoteMint=req.quote_mint,
    )
    for name, bps in (("walletABps", req.wallet_a_bps), ("walletBBps", req.wallet_b_bps)):
        if not 0 <= bps <= MAX_BPS:
            raise ValidationError(f"{name} must be between 0 and {MAX_BPS}, got {bps}")


def create_fee_share_config(
    http: BagsHttpClient,
    req: CreateFeeShareConfigRequest,
    *,
    timeout: Optional[float] = None,
) -> FeeShareConfig:
    """Build the transaction that creates a two-wallet fee-share config.

    POST token-launch/fee-share/create-config

    When the config already exists the returned ``tx`` is empty and only
    ``config_key`` is meaningful.
    """

    if req is None:
        raise ValidationError("request is required")
    validate_fee_share_config(req)
    data = http.post_json("token-launch/fee-share/create-config", req, timeout=timeout)
    return unwrap_model(data, FeeShareConfig)
