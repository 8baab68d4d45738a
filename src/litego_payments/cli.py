"""
Command-line interface for exercising the Litego merchant API.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from .api import create_client
from .core.client import WITHDRAWAL_ADDRESS_TYPES, LitegoClient
from .core.config import ConfigError, LIVE_MODE, TEST_MODE, load_config
from .core.results import ApiResult, Success
from .core.session import AuthenticationError
from .core.subscription import SubscriptionError, Topic

WITHDRAWAL_STATUSES = ("created", "performed", "confirmed")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def _add_paging(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--page", type=int, help="Page number to fetch")
    parser.add_argument("--page-size", type=int, help="Number of items per page")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="litego",
        description="Call the Litego merchant API from the command line",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing LITEGO_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--mode",
        choices=(LIVE_MODE, TEST_MODE),
        help="Use the production (live) or sandbox (test) service",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("authenticate", help="Obtain a fresh auth/refresh token pair")
    commands.add_parser("merchant", help="Show the authenticated merchant")

    charge = commands.add_parser("charge", help="Create and inspect charges")
    charge_actions = charge.add_subparsers(dest="action", required=True)
    create = charge_actions.add_parser("create", help="Create a charge")
    create.add_argument("--description", default="")
    create.add_argument("--amount-satoshi", type=int, required=True)
    get = charge_actions.add_parser("get", help="Show a single charge")
    get.add_argument("charge_id")
    listing = charge_actions.add_parser("list", help="List charges")
    _add_paging(listing)
    listing.add_argument("--paid-only", action="store_true", default=None)

    withdrawal = commands.add_parser("withdrawal", help="Manage withdrawals")
    withdrawal_actions = withdrawal.add_subparsers(dest="action", required=True)
    address = withdrawal_actions.add_parser("set-address", help="Set the withdrawal address")
    address.add_argument("--type", dest="address_type", choices=WITHDRAWAL_ADDRESS_TYPES, default="regular")
    address.add_argument("--value", required=True)
    withdrawal_actions.add_parser("trigger", help="Trigger a manual withdrawal")
    withdrawals = withdrawal_actions.add_parser("list", help="List withdrawals")
    _add_paging(withdrawals)
    withdrawals.add_argument("--status", choices=WITHDRAWAL_STATUSES)
    withdrawal_actions.add_parser("settings", help="Show withdrawal fees and limits")

    webhook = commands.add_parser("webhook", help="Manage webhook notifications")
    webhook_actions = webhook.add_subparsers(dest="action", required=True)
    set_url = webhook_actions.add_parser("set-url", help="Set the notification URL")
    set_url.add_argument("url")
    responses = webhook_actions.add_parser("responses", help="List notification responses")
    _add_paging(responses)

    referrals = commands.add_parser("referrals", help="List referral payments")
    _add_paging(referrals)

    subscribe = commands.add_parser("subscribe", help="Wait for one payment event")
    subscribe.add_argument("--charge-id", help="Only wait for payment of this charge")
    subscribe.add_argument(
        "--timeout",
        type=int,
        help="Seconds to wait without any frame before giving up",
    )
    return parser


def _filters(args: argparse.Namespace, **extra: Any) -> Dict[str, Any]:
    values = {
        "page": getattr(args, "page", None),
        "pageSize": getattr(args, "page_size", None),
    }
    values.update(extra)
    return {key: value for key, value in values.items() if value is not None}


def _dispatch(client: LitegoClient, args: argparse.Namespace) -> ApiResult | str:
    command = args.command
    action = getattr(args, "action", None)

    if command == "authenticate":
        return client.authenticate()
    if command == "merchant":
        return client.get_merchant()
    if command == "charge":
        if action == "create":
            return client.create_charge(args.description, args.amount_satoshi)
        if action == "get":
            return client.get_charge(args.charge_id)
        return client.list_charges(_filters(args, paidOnly=args.paid_only))
    if command == "withdrawal":
        if action == "set-address":
            return client.set_withdrawal_address(args.address_type, args.value)
        if action == "trigger":
            return client.trigger_withdrawal()
        if action == "settings":
            return client.get_withdrawal_settings()
        return client.list_withdrawals(_filters(args, status=args.status))
    if command == "webhook":
        if action == "set-url":
            return client.set_notification_url(args.url)
        return client.list_webhook_responses(_filters(args))
    if command == "referrals":
        return client.list_referral_payments(_filters(args))

    topic = Topic.charge(args.charge_id) if args.charge_id else Topic.all_payments()
    logging.info("Waiting for a payment event on %s", topic)
    return client.open_subscription(topic, timeout=args.timeout).wait()


def _emit(outcome: ApiResult | str) -> int:
    if isinstance(outcome, str):
        print(outcome)
        return 0
    if isinstance(outcome, Success):
        print(json.dumps(outcome.value, indent=2, sort_keys=True))
        return 0

    logging.error(
        "Request failed with %s %s: %s",
        outcome.code,
        outcome.error_name,
        outcome.error_message,
    )
    print(json.dumps(asdict(outcome), indent=2, sort_keys=True))
    return 1


def run_cli(argv: Sequence[str] | None = None, *, client: Optional[LitegoClient] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    if client is None:
        overrides = _collect_overrides(args.set or ())
        try:
            config = load_config(env_file=args.env_file, overrides=overrides, mode=args.mode)
        except (KeyError, ConfigError, ValueError) as exc:
            logging.error("Invalid configuration: %s", exc)
            return 1
        client = create_client(config=config)

    with client:
        try:
            outcome = _dispatch(client, args)
        except AuthenticationError as exc:
            logging.error("Authentication failed: %s", exc)
            return 1
        except SubscriptionError as exc:
            logging.error("Subscription failed: %s", exc)
            return 1
        except ValueError as exc:
            logging.error("Invalid argument: %s", exc)
            return 1

    return _emit(outcome)


def main() -> None:
    sys.exit(run_cli())
