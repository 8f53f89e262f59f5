"""Token analytics endpoints."""

from __future__ import annotations

from typing import List, Optional

from bagsfm.client.http import BagsHttpClient
from bagsfm.endpoints.base import require, unwrap_list, unwrap_str
from bagsfm.models import TokenCreator


def get_token_lifetime_fees(
    http: BagsHttpClient, token_mint: str, *, timeout: Optional[float] = None
) -> str:
    """Total lifetime fees collected for a token, in lamports, as returned by the API.

    GET token-launch/lifetime-fees?tokenMint=<mint>
    """

    require(tokenMint=token_mint)
    data = http.get(
        "token-launch/lifetime-fees", query={"tokenMint": token_mint.strip()}, timeout=timeout
    )
    return unwrap_str(data, required=False)


def get_token_launch_creators(
    http: BagsHttpClient, token_mint: str, *, timeout: Optional[float] = None
) -> List[TokenCreator]:
    """Creators and fee claimers of a token launch.

    GET token-launch/creator/v2?tokenMint=<mint>
    """

    require(tokenMint=token_mint)
    data = http.get(
        "token-launch/creator/v2", query={"tokenMint": token_mint.strip()}, timeout=timeout
    )
    return unwrap_list(data, TokenCreator)
