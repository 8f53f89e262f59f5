from __future__ import annotations

import io
import json
import threading
from urllib.parse import parse_qs, urlsplit

import pytest

from bagsfm.errors import BagsAPIError, UnexpectedResponseError, ValidationError
from bagsfm.models import (
    WSOL_MINT,
    CreateFeeShareConfigRequest,
    CreateLaunchConfigRequest,
    CreateLaunchTransactionRequest,
    CreateTokenInfoRequest,
)

MINT = "5qSVmtYCNmsEpktudHJCoUcHPEqmY9TN2xwv59NJBAGS"


def _query(req) -> dict:
    return {k: v[0] for k, v in parse_qs(urlsplit(req.url).query).items()}


def _fee_share_request(**overrides) -> CreateFeeShareConfigRequest:
    values = dict(
        wallet_a="WalletA111",
        wallet_b="WalletB222",
        wallet_a_bps=1000,
        wallet_b_bps=9000,
        payer="Payer333",
        base_mint=MINT,
    )
    values.update(overrides)
    return CreateFeeShareConfigRequest(**values)


def test_ping(client, transport):
    transport.queue_json({"message": "PONG"})
    client.ping()
    assert urlsplit(transport.requests[0].url).path == "/api/v1/ping"


def test_ping_unexpected_message(client, transport):
    transport.queue_json({"message": "hello"})
    with pytest.raises(UnexpectedResponseError):
        client.ping()


def test_fee_share_wallet_for_handle(client, transport):
    transport.queue_json({"success": True, "response": "WalletAddr111"})

    assert client.get_fee_share_wallet("alice123") == "WalletAddr111"

    (req,) = transport.requests
    assert urlsplit(req.url).path == "/api/v1/token-launch/fee-share/wallet/twitter"
    assert _query(req) == {"twitterUsername": "alice123"}


def test_fee_share_wallet_strips_at_sign(client, transport):
    transport.queue_json({"success": True, "response": "W"})
    client.get_fee_share_wallet("  @alice123 ")
    assert _query(transport.requests[0]) == {"twitterUsername": "alice123"}


@pytest.mark.parametrize("payload", [{"success": True, "response": ""}, {"success": True}])
def test_fee_share_wallet_empty_response_is_unexpected(client, transport, payload):
    transport.queue_json(payload)
    with pytest.raises(UnexpectedResponseError):
        client.get_fee_share_wallet("alice123")


@pytest.mark.parametrize("handle", ["", "   ", "@"])
def test_fee_share_wallet_blank_handle_rejected_locally(client, transport, handle):
    with pytest.raises(ValidationError):
        client.get_fee_share_wallet(handle)
    assert transport.requests == []


def test_create_fee_share_config(client, transport):
    transport.queue_json({"success": True, "response": {"tx": "BASE64TX", "configKey": "Cfg1"}})

    result = client.create_fee_share_config(_fee_share_request())

    assert result.tx == "BASE64TX"
    assert result.config_key == "Cfg1"
    (req,) = transport.requests
    assert urlsplit(req.url).path == "/api/v1/token-launch/fee-share/create-config"
    assert json.loads(req.body) == {
        "walletA": "WalletA111",
        "walletB": "WalletB222",
        "walletABps": 1000,
        "walletBBps": 9000,
        "payer": "Payer333",
        "baseMint": MINT,
        "quoteMint": WSOL_MINT,
    }


def test_create_fee_share_config_existing_config_has_no_tx(client, transport):
    transport.queue_json({"success": True, "response": {"configKey": "Cfg1"}})
    result = client.create_fee_share_config(_fee_share_request())
    assert result.tx == ""
    assert result.config_key == "Cfg1"


@pytest.mark.parametrize(
    "overrides",
    [
        {"wallet_a": " "},
        {"payer": ""},
        {"quote_mint": ""},
        {"wallet_a_bps": -1, "wallet_b_bps": 10001},
        {"wallet_b_bps": 10001},
    ],
)
def test_create_fee_share_config_validation(client, transport, overrides):
    with pytest.raises(ValidationError):
        client.create_fee_share_config(_fee_share_request(**overrides))
    assert transport.requests == []


def test_create_fee_share_config_null_tx_reads_as_empty(client, transport):
    transport.queue_json({"success": True, "response": {"tx": None, "configKey": "K"}})
    result = client.create_fee_share_config(_fee_share_request())
    assert (result.tx, result.config_key) == ("", "K")


def test_create_fee_share_config_leaves_split_total_to_api(client, transport):
    transport.queue_json({"success": False, "error": "shares must total 10000"}, status=400)

    with pytest.raises(BagsAPIError):
        client.create_fee_share_config(_fee_share_request(wallet_a_bps=5000, wallet_b_bps=4000))

    body = json.loads(transport.requests[0].body)
    assert (body["walletABps"], body["walletBBps"]) == (5000, 4000)


def test_create_fee_share_config_missing_response(client, transport):
    transport.queue_json({"success": True, "response": None})
    with pytest.raises(UnexpectedResponseError):
        client.create_fee_share_config(_fee_share_request())


def test_create_launch_config_blank_wallet_makes_no_request(client, transport):
    with pytest.raises(ValidationError, match="launchWallet"):
        client.create_token_launch_config(CreateLaunchConfigRequest(launch_wallet="  "))
    assert transport.requests == []


def test_create_launch_config(client, transport):
    transport.queue_json({"success": True, "response": {"tx": "TX", "configKey": "K"}})

    result = client.create_token_launch_config(CreateLaunchConfigRequest(launch_wallet="W1"))

    assert (result.tx, result.config_key) == ("TX", "K")
    assert json.loads(transport.requests[0].body) == {"launchWallet": "W1"}


def test_create_launch_transaction(client, transport):
    transport.queue_json({"success": True, "response": "AQID"})
    req = CreateLaunchTransactionRequest(
        ipfs="https://ipfs.io/ipfs/Qm1",
        token_mint=MINT,
        wallet="W1",
        initial_buy_lamports=10_000_000,
        config_key="K",
    )

    assert client.create_token_launch_transaction(req) == "AQID"
    body = json.loads(transport.requests[0].body)
    assert body["initialBuyLamports"] == 10_000_000
    assert body["configKey"] == "K"
    assert urlsplit(transport.requests[0].url).path.endswith("/create-launch-transaction")


def test_create_launch_transaction_empty_tx_is_unexpected(client, transport):
    transport.queue_json({"success": True, "response": "  "})
    req = CreateLaunchTransactionRequest(ipfs="i", token_mint=MINT, wallet="W", config_key="K")
    with pytest.raises(UnexpectedResponseError):
        client.create_token_launch_transaction(req)


def test_create_launch_transaction_validation(client, transport):
    req = CreateLaunchTransactionRequest(ipfs="", token_mint=MINT, wallet="", config_key="K")
    with pytest.raises(ValidationError, match="ipfs, wallet are required"):
        client.create_token_launch_transaction(req)

    req = CreateLaunchTransactionRequest(
        ipfs="i", token_mint=MINT, wallet="W", config_key="K", initial_buy_lamports=-5
    )
    with pytest.raises(ValidationError):
        client.create_token_launch_transaction(req)
    assert transport.requests == []


def test_lifetime_fees(client, transport):
    transport.queue_json({"success": True, "response": "123456789"})

    assert client.get_token_lifetime_fees(MINT) == "123456789"
    req = transport.requests[0]
    assert urlsplit(req.url).path == "/api/v1/token-launch/lifetime-fees"
    assert _query(req) == {"tokenMint": MINT}


def test_lifetime_fees_success_false_is_unexpected(client, transport):
    transport.queue_json({"success": False, "response": "0"})
    with pytest.raises(UnexpectedResponseError):
        client.get_token_lifetime_fees(MINT)


def test_lifetime_fees_api_error(client, transport):
    transport.queue_json({"success": False, "error": "bad mint"}, status=400)
    with pytest.raises(BagsAPIError) as ei:
        client.get_token_lifetime_fees("nope")
    assert (ei.value.status, ei.value.message) == (400, "bad mint")


def test_launch_creators(client, transport):
    transport.queue_json(
        {
            "success": True,
            "response": [
                {
                    "username": "bagsdev",
                    "pfp": "https://img.example/p.png",
                    "twitterUsername": "bagsdev",
                    "royaltyBps": 250,
                    "isCreator": True,
                    "wallet": "Creator111",
                },
                {"username": "partner", "royaltyBps": 9750, "isCreator": False, "wallet": "P2"},
            ],
        }
    )

    creators = client.get_token_launch_creators(MINT)

    assert [c.wallet for c in creators] == ["Creator111", "P2"]
    assert creators[0].is_creator is True
    assert creators[0].royalty_bps == 250
    assert creators[1].twitter_username == ""
    assert urlsplit(transport.requests[0].url).path == "/api/v1/token-launch/creator/v2"


def test_launch_creators_null_fields_decode_as_defaults(client, transport):
    transport.queue_json(
        {
            "success": True,
            "response": [
                {
                    "username": "bagsdev",
                    "pfp": None,
                    "twitterUsername": None,
                    "royaltyBps": None,
                    "isCreator": True,
                    "wallet": "Creator111",
                }
            ],
        }
    )

    (creator,) = client.get_token_launch_creators(MINT)

    assert creator.pfp == ""
    assert creator.twitter_username == ""
    assert creator.royalty_bps == 0
    assert creator.wallet == "Creator111"


def test_launch_creators_null_response_is_empty(client, transport):
    transport.queue_json({"success": True, "response": None})
    assert client.get_token_launch_creators(MINT) == []


def test_launch_creators_requires_mint(client, transport):
    with pytest.raises(ValidationError):
        client.get_token_launch_creators(" ")
    assert transport.requests == []


def _token_info_response() -> dict:
    return {
        "success": True,
        "response": {
            "tokenMint": MINT,
            "tokenMetadata": "https://ipfs.io/ipfs/QmMeta",
            "tokenLaunch": {
                "userId": "u1",
                "name": "Bag Token",
                "symbol": "BAG",
                "description": "",
                "image": "https://ipfs.io/ipfs/QmImg",
                "tokenMint": MINT,
                "status": "PRE_LAUNCH",
                "createdAt": "2025-01-01T00:00:00Z",
                "updatedAt": "2025-01-01T00:00:00Z",
            },
        },
    }


def test_create_token_info_streams_multipart(client, transport):
    transport.queue_json(_token_info_response())
    req = CreateTokenInfoRequest(
        name="Bag Token",
        symbol="BAG",
        twitter="https://x.com/bags",
        image=io.BytesIO(b"\x89PNG-image-bytes"),
        image_filename="logo.png",
        image_mime_type="image/png",
    )

    info = client.create_token_info_and_metadata(req)

    assert info.token_mint == MINT
    assert info.token_metadata == "https://ipfs.io/ipfs/QmMeta"
    assert info.token_launch.status == "PRE_LAUNCH"

    (sent,) = transport.requests
    assert urlsplit(sent.url).path == "/api/v1/token-launch/create-token-info"
    ctype = sent.headers["Content-Type"]
    assert ctype.startswith("multipart/form-data; boundary=")
    boundary = ctype.split("boundary=", 1)[1]
    assert sent.body.endswith(f"--{boundary}--\r\n".encode())
    assert b'name="twitter"' in sent.body
    assert b'name="description"' not in sent.body
    assert b'filename="logo.png"\r\nContent-Type: image/png' in sent.body
    assert b"\x89PNG-image-bytes" in sent.body


def test_create_token_info_from_path(client, transport, tmp_path):
    img = tmp_path / "logo.png"
    img.write_bytes(b"png-bytes")
    transport.queue_json(_token_info_response())

    client.create_token_info_and_metadata(
        CreateTokenInfoRequest(name="Bag Token", symbol="BAG"), image_path=str(img)
    )

    body = transport.requests[0].body
    assert b'filename="logo.png"\r\nContent-Type: image/png' in body
    assert b"png-bytes" in body


@pytest.mark.parametrize(
    "req",
    [
        CreateTokenInfoRequest(name="", symbol="BAG", image=io.BytesIO(b"x"), image_filename="a"),
        CreateTokenInfoRequest(name="Bag", symbol="BAG", image=None, image_filename="a.png"),
        CreateTokenInfoRequest(name="Bag", symbol="BAG", image=io.BytesIO(b"x")),
    ],
)
def test_create_token_info_validation(client, transport, req):
    with pytest.raises(ValidationError):
        client.create_token_info_and_metadata(req)
    assert transport.requests == []


def test_create_token_info_source_failure_propagates(client, transport):
    class Broken:
        def read(self, n=-1):
            raise OSError("read error mid-stream")

    req = CreateTokenInfoRequest(
        name="Bag", symbol="BAG", image=Broken(), image_filename="logo.png"
    )

    with pytest.raises(OSError, match="read error mid-stream"):
        client.create_token_info_and_metadata(req)

    assert transport.requests == []
    assert not [t for t in threading.enumerate() if t.name == "bagsfm-multipart"]
