from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from typing import Any, List, Optional, Tuple

WSOL_MINT = "So11111111111111111111111111111111111111112"


class WireModel(BaseModel):
    """Base for API shapes: snake_case attributes, camelCase on the wire.

    A JSON ``null`` in a field that has a default decodes as that default, so
    ``{"tx": null}`` reads the same as a missing ``tx``.
    """

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name is not None:
            field = cls.model_fields[info.field_name]
            if not field.is_required():
                return field.get_default(call_default_factory=True)
        return value


class Envelope(WireModel):
    """Uniform success envelope returned by every endpoint."""

    success: bool = False
    response: Any = None


class ApiErrorPayload(WireModel):
    """Uniform error envelope: ``{"success": false, "error": "...", "status": 400}``."""

    success: bool = False
    error: str = ""
    status: Optional[int] = None


class TokenCreator(WireModel):
    """A creator or fee claimer attached to a token launch."""

    username: str = ""
    pfp: str = ""
    twitter_username: str = Field(default="", alias="twitterUsername")
    royalty_bps: int = Field(default=0, alias="royaltyBps")
    is_creator: bool = Field(default=False, alias="isCreator")
    wallet: str = ""


class CreateFeeShareConfigRequest(WireModel):
    """Body for POST token-launch/fee-share/create-config.

    Each wallet share is in basis points, 0..10000.
    """

    wallet_a: str = Field(alias="walletA")
    wallet_b: str = Field(alias="walletB")
    wallet_a_bps: int = Field(alias="walletABps")
    wallet_b_bps: int = Field(alias="walletBBps")
    payer: str
    base_mint: str = Field(alias="baseMint")
    quote_mint: str = Field(default=WSOL_MINT, alias="quoteMint")


class FeeShareConfig(WireModel):
    """Fee-share config transaction; ``tx`` is empty when the config already exists."""

    tx: str = ""
    config_key: str = Field(default="", alias="configKey")


class CreateLaunchConfigRequest(WireModel):
    """Body for POST token-launch/create-config."""

    launch_wallet: str = Field(alias="launchWallet")


class LaunchConfig(WireModel):
    tx: str = ""
    config_key: str = Field(default="", alias="configKey")


class CreateLaunchTransactionRequest(WireModel):
    """Body for POST token-launch/create-launch-transaction."""

    ipfs: str
    token_mint: str = Field(alias="tokenMint")
    wallet: str
    initial_buy_lamports: int = Field(default=0, alias="initialBuyLamports")
    config_key: str = Field(alias="configKey")


class TokenLaunch(WireModel):
    """Launch record created alongside token metadata."""

    user_id: str = Field(default="", alias="userId")
    name: str = ""
    symbol: str = ""
    description: str = ""
    telegram: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None
    image: str = ""
    token_mint: str = Field(default="", alias="tokenMint")
    status: str = ""
    launch_wallet: Optional[str] = Field(default=None, alias="launchWallet")
    launch_signature: Optional[str] = Field(default=None, alias="launchSignature")
    uri: Optional[str] = None
    created_at: str = Field(default="", alias="createdAt")
    updated_at: str = Field(default="", alias="updatedAt")


class TokenInfo(WireModel):
    """Result of POST token-launch/create-token-info."""

    token_mint: str = Field(alias="tokenMint")
    token_metadata: str = Field(default="", alias="tokenMetadata")
    token_launch: Optional[TokenLaunch] = Field(default=None, alias="tokenLaunch")


class CreateTokenInfoRequest(WireModel):
    """Token metadata plus the image to upload as multipart/form-data.

    ``image`` is any binary stream with a ``read`` method; it is consumed
    incrementally and never buffered whole.
    """

    name: str
    symbol: str
    description: str = ""
    telegram: str = ""
    twitter: str = ""
    website: str = ""
    image: Any = None
    image_filename: str = ""
    image_mime_type: str = ""

    def form_fields(self) -> List[Tuple[str, str]]:
        """Text fields in wire order; blanks are dropped by the encoder."""

        return [
            ("name", self.name),
            ("symbol", self.symbol),
            ("description", self.description),
            ("telegram", self.telegram),
            ("twitter", self.twitter),
            ("website", self.website),
        ]
