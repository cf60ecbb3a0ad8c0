# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Command-line interface for the TRTL Apps Python SDK.

Each command maps to one :class:`~trtl_apps.async_client.TrtlApp` operation. On
success the result is printed as JSON; on failure the error code and message
are printed to stderr and the process exits with status 1.

Credentials are read from ``--app-id`` / ``--app-secret`` / ``--api-base`` or,
when omitted, from ``TRTL_APPS_APP_ID`` / ``TRTL_APPS_APP_SECRET`` /
``TRTL_APPS_API_BASE``.

Examples:
    Query the current withdrawal node fee::

        python -m trtl_apps.cli fee

    Transfer to two accounts at once::

        python -m trtl_apps.cli transfer --sender-id 8RgwiWmgiYKQlUHWGaTW \\
            --recipient DawR7cEvQjEWMBVmMkkn=22 --recipient rwszORa1qaSXK0RbZ7F5=25

    Two-phase withdrawal::

        python -m trtl_apps.cli preview-withdrawal --account-id 8RgwiWmgiYKQlUHWGaTW --amount 1000
        python -m trtl_apps.cli withdraw --preview-id uOw2KOPWpbLEzDahZWoR
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import io
import json
import sys
import unittest
import unittest.mock
from typing import Any, List, Tuple

from .async_client import ClientConfig, TrtlApp
from .result import Err, Ok, Result
from .service_error import ServiceError, ServiceErrorCode
from .types import Recipient

COMMANDS = [
    "create-account",
    "get-account",
    "get-accounts",
    "get-deposit",
    "set-withdraw-address",
    "transfer",
    "get-transfer",
    "fee",
    "preview-withdrawal",
    "withdraw",
    "get-withdrawal",
    "validate-address",
]


def recipient(indata: str) -> Recipient:
    """Parse ``account_id=amount`` into a :class:`Recipient`."""
    split_indata = indata.split("=")
    if len(split_indata) != 2:
        raise argparse.ArgumentTypeError(
            f"Invalid recipient '{indata}', expected account_id=amount"
        )
    account_id, amount = split_indata
    try:
        return Recipient(account_id, int(amount))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid amount in recipient '{indata}'")


def to_json(value: Any) -> str:
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    elif isinstance(value, list):
        value = [item.to_dict() if hasattr(item, "to_dict") else item for item in value]
    return json.dumps(value, indent=2)


async def run_command(
    app: TrtlApp, parser: argparse.ArgumentParser, parsed_args: argparse.Namespace
) -> Result[Any]:
    command = parsed_args.command

    def required(name: str) -> Any:
        value = getattr(parsed_args, name)
        if value is None or value == []:
            parser.error(
                f"Missing required argument '--{name.replace('_', '-')}' for {command}"
            )
        return value

    if command == "create-account":
        return await app.create_account()
    if command == "get-account":
        return await app.get_account(required("account_id"))
    if command == "get-accounts":
        return await app.get_accounts(
            parsed_args.order_by, parsed_args.limit, parsed_args.start_after
        )
    if command == "get-deposit":
        return await app.get_deposit(required("deposit_id"))
    if command == "set-withdraw-address":
        return await app.set_withdraw_address(
            required("account_id"), required("address")
        )
    if command == "transfer":
        return await app.transfer_many(required("sender_id"), required("recipient"))
    if command == "get-transfer":
        return await app.get_transfer(required("transfer_id"))
    if command == "fee":
        return await app.get_fee()
    if command == "preview-withdrawal":
        return await app.withdrawal_preview(
            required("account_id"), required("amount"), parsed_args.address
        )
    if command == "withdraw":
        return await app.withdraw(required("preview_id"))
    if command == "get-withdrawal":
        return await app.get_withdrawal(required("withdrawal_id"))
    if command == "validate-address":
        return await app.validate_address(
            required("address"), not parsed_args.no_integrated
        )
    parser.error(f"Unknown command {command}")


async def main(args: List[str]) -> int:
    """Parse ``args``, run one command and return the process exit code."""
    parser = argparse.ArgumentParser(description="TRTL Apps Python CLI")
    parser.add_argument(
        "command", type=str, help="The command to execute", choices=COMMANDS
    )
    parser.add_argument("--app-id", help="The app ID", type=str)
    parser.add_argument("--app-secret", help="The app secret", type=str)
    parser.add_argument(
        "--api-base",
        help="TRTL Apps API base URL (e.g., https://trtlapps.io/api)",
        type=str,
    )
    parser.add_argument("--account-id", type=str)
    parser.add_argument("--deposit-id", type=str)
    parser.add_argument("--transfer-id", type=str)
    parser.add_argument("--withdrawal-id", type=str)
    parser.add_argument("--preview-id", type=str)
    parser.add_argument("--sender-id", type=str)
    parser.add_argument(
        "--recipient",
        help="Recipient in format 'account_id=amount' (can be specified multiple times)",
        action="append",
        type=recipient,
        default=[],
    )
    parser.add_argument("--amount", help="Amount in atomic units", type=int)
    parser.add_argument("--address", type=str)
    parser.add_argument(
        "--no-integrated",
        help="Reject integrated addresses in validate-address",
        action="store_true",
    )
    parser.add_argument("--order-by", type=str, default="createdAt")
    parser.add_argument("--limit", type=int)
    parser.add_argument("--start-after", type=str)
    parsed_args = parser.parse_args(args)

    config = ClientConfig.from_env()
    config.app_id = parsed_args.app_id or config.app_id
    config.app_secret = parsed_args.app_secret or config.app_secret
    config.api_base = parsed_args.api_base or config.api_base

    async with TrtlApp(config) as app:
        result = await run_command(app, parser, parsed_args)

    value, error = result
    if error is not None:
        print(str(error), file=sys.stderr)
        return 1
    print(to_json(value))
    return 0


def run():
    sys.exit(asyncio.run(main(sys.argv[1:])))


class Test(unittest.IsolatedAsyncioTestCase):
    CREDENTIALS = ["--app-id", "A1", "--app-secret", "S1"]

    async def run_main(self, args: List[str]) -> Tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = await main(args)
        return code, stdout.getvalue(), stderr.getvalue()

    async def test_fee(self):
        with unittest.mock.patch(
            "trtl_apps.async_client.TrtlApp.get_fee", return_value=Ok(10)
        ):
            code, out, _ = await self.run_main(["fee"] + self.CREDENTIALS)
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), 10)

    async def test_transfer_recipients(self):
        with unittest.mock.patch(
            "trtl_apps.async_client.TrtlApp.transfer_many",
            return_value=Err(ServiceError(ServiceErrorCode.INSUFFICIENT_FUNDS)),
        ) as transfer_many:
            code, out, err = await self.run_main(
                ["transfer", "--sender-id", "acc1"]
                + ["--recipient", "acc2=22", "--recipient", "acc3=25"]
                + self.CREDENTIALS
            )
        transfer_many.assert_awaited_once_with(
            "acc1", [Recipient("acc2", 22), Recipient("acc3", 25)]
        )
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertIn("transfer/insufficient-funds", err)

    async def test_not_initialized(self):
        with unittest.mock.patch.dict("os.environ", {}, clear=True):
            code, _, err = await self.run_main(["fee"])
        self.assertEqual(code, 1)
        self.assertIn("service/not-initialized", err)

    async def test_missing_argument(self):
        with self.assertRaises(SystemExit):
            await self.run_main(["get-account"] + self.CREDENTIALS)

    def test_recipient(self):
        self.assertEqual(recipient("acc2=22"), Recipient("acc2", 22))
        for indata in ["acc2", "acc2=ten", "a=b=c"]:
            with self.assertRaises(argparse.ArgumentTypeError):
                recipient(indata)


if __name__ == "__main__":
    run()
