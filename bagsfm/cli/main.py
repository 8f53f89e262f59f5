from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List

from bagsfm.client.config import ClientConfig
from bagsfm.client.service import BagsClient
from bagsfm.errors import BagsError
from bagsfm.models import (
    WSOL_MINT,
    CreateFeeShareConfigRequest,
    CreateLaunchConfigRequest,
    CreateLaunchTransactionRequest,
    CreateTokenInfoRequest,
)
from bagsfm.utils.json_safe import to_jsonable

log = logging.getLogger("bagsfm.cli")


def _print_json(obj: object) -> None:
    """Print JSON to stdout."""
    print(json.dumps(to_jsonable(obj), indent=2, sort_keys=True))


def _client(args: argparse.Namespace) -> BagsClient:
    cfg = ClientConfig.from_env(
        api_key=args.api_key, base_url=args.base_url, timeout_sec=args.timeout
    )
    return BagsClient(config=cfg)


def cmd_ping(args: argparse.Namespace) -> int:
    """Call GET /ping."""
    _client(args).ping()
    _print_json({"message": "pong"})
    return 0


def cmd_lifetime_fees(args: argparse.Namespace) -> int:
    fees = _client(args).get_token_lifetime_fees(args.token_mint)
    _print_json({"tokenMint": args.token_mint, "lifetimeFeesLamports": fees})
    return 0


def cmd_creators(args: argparse.Namespace) -> int:
    _print_json(_client(args).get_token_launch_creators(args.token_mint))
    return 0


def cmd_fee_share_wallet(args: argparse.Namespace) -> int:
    wallet = _client(args).get_fee_share_wallet(args.twitter_username)
    _print_json({"twitterUsername": args.twitter_username, "wallet": wallet})
    return 0


def cmd_create_fee_share_config(args: argparse.Namespace) -> int:
    req = CreateFeeShareConfigRequest(
        wallet_a=args.wallet_a,
        wallet_b=args.wallet_b,
        wallet_a_bps=args.wallet_a_bps,
        wallet_b_bps=args.wallet_b_bps,
        payer=args.payer,
        base_mint=args.base_mint,
        quote_mint=args.quote_mint,
    )
    _print_json(_client(args).create_fee_share_config(req))
    return 0


def cmd_create_launch_config(args: argparse.Namespace) -> int:
    req = CreateLaunchConfigRequest(launch_wallet=args.launch_wallet)
    _print_json(_client(args).create_token_launch_config(req))
    return 0


def cmd_create_launch_tx(args: argparse.Namespace) -> int:
    req = CreateLaunchTransactionRequest(
        ipfs=args.ipfs,
        token_mint=args.token_mint,
        wallet=args.wallet,
        initial_buy_lamports=args.initial_buy_lamports,
        config_key=args.config_key,
    )
    tx = _client(args).create_token_launch_transaction(req)
    _print_json({"transaction": tx})
    return 0


def cmd_create_token_info(args: argparse.Namespace) -> int:
    """Upload metadata + image to POST token-launch/create-token-info."""
    req = CreateTokenInfoRequest(
        name=args.name,
        symbol=args.symbol,
        description=args.description or "",
        telegram=args.telegram or "",
        twitter=args.twitter or "",
        website=args.website or "",
        image_mime_type=args.image_mime or "",
    )
    _print_json(_client(args).create_token_info_and_metadata(req, image_path=args.image))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="bagsfm", description="Bags token-launch API client")
    p.add_argument("--api-key", default=None, help="API key (default: $BAGS_API_KEY)")
    p.add_argument("--base-url", default=None, help="API base URL (default: $BAGS_BASE_URL)")
    p.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    p.add_argument(
        "--log-level",
        default=os.environ.get("BAGS_LOG_LEVEL", "WARNING"),
        help="Logging level (default: $BAGS_LOG_LEVEL or WARNING)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    pg = sub.add_parser("ping", help="Check API connectivity and key")
    pg.set_defaults(func=cmd_ping)

    lf = sub.add_parser("lifetime-fees", help="Lifetime fees collected for a token")
    lf.add_argument("token_mint", help="Token mint address")
    lf.set_defaults(func=cmd_lifetime_fees)

    cr = sub.add_parser("creators", help="Creators of a token launch")
    cr.add_argument("token_mint", help="Token mint address")
    cr.set_defaults(func=cmd_creators)

    fw = sub.add_parser("fee-share-wallet", help="Fee-share wallet for a Twitter handle")
    fw.add_argument("twitter_username", help="Twitter handle (with or without @)")
    fw.set_defaults(func=cmd_fee_share_wallet)

    fc = sub.add_parser("create-fee-share-config", help="Create a two-wallet fee-share config")
    fc.add_argument("--wallet-a", required=True, help="First wallet (base58)")
    fc.add_argument("--wallet-b", required=True, help="Second wallet (base58)")
    fc.add_argument("--wallet-a-bps", type=int, required=True, help="Share of wallet A in bps")
    fc.add_argument("--wallet-b-bps", type=int, required=True, help="Share of wallet B in bps")
    fc.add_argument("--payer", required=True, help="Payer wallet")
    fc.add_argument("--base-mint", required=True, help="Token mint the fees apply to")
    fc.add_argument("--quote-mint", default=WSOL_MINT, help="Quote mint (default: wSOL)")
    fc.set_defaults(func=cmd_create_fee_share_config)

    lc = sub.add_parser("create-launch-config", help="Create a launch config transaction")
    lc.add_argument("launch_wallet", help="Launch wallet (base58)")
    lc.set_defaults(func=cmd_create_launch_config)

    lt = sub.add_parser("create-launch-tx", help="Create the token launch transaction")
    lt.add_argument("--ipfs", required=True, help="Metadata URI from create-token-info")
    lt.add_argument("--token-mint", required=True, help="Token mint from create-token-info")
    lt.add_argument("--wallet", required=True, help="Launch wallet")
    lt.add_argument("--config-key", required=True, help="Config key from create-launch-config")
    lt.add_argument(
        "--initial-buy-lamports", type=int, default=0, help="Initial buy amount in lamports"
    )
    lt.set_defaults(func=cmd_create_launch_tx)

    ti = sub.add_parser("create-token-info", help="Upload token metadata and image")
    ti.add_argument("image", help="Path to image file")
    ti.add_argument("--name", required=True, help="Token name")
    ti.add_argument("--symbol", required=True, help="Token symbol")
    ti.add_argument("--description", default=None, help="Token description")
    ti.add_argument("--telegram", default=None, help="Telegram link")
    ti.add_argument("--twitter", default=None, help="Twitter link")
    ti.add_argument("--website", default=None, help="Website link")
    ti.add_argument("--image-mime", default=None, help="Image MIME type (default: guessed)")
    ti.set_defaults(func=cmd_create_token_info)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=str(args.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        return int(args.func(args))
    except (BagsError, OSError) as e:
        log.debug("command failed", extra={"cmd": args.cmd, "error_type": type(e).__name__})
        print(str(e), file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
