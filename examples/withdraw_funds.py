# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Two-phase withdrawal example.

Quotes a withdrawal for an account with :meth:`TrtlApp.withdrawal_preview`,
prints the fee breakdown and executes it with :meth:`TrtlApp.withdraw`.

Examples:
    Withdraw 1000 atomic units to the account's withdraw address::

        python -m examples.withdraw_funds 8RgwiWmgiYKQlUHWGaTW 1000

    Withdraw to an explicit address::

        python -m examples.withdraw_funds 8RgwiWmgiYKQlUHWGaTW 1000 TRTLv32bGBP2cfM3...
"""

import asyncio
import sys

from trtl_apps.async_client import ClientConfig, TrtlApp

from .common import API_BASE, APP_ID, APP_SECRET


async def main(account_id: str, amount: int, send_address=None):
    async with TrtlApp(ClientConfig(APP_ID, APP_SECRET, API_BASE)) as app:
        print("\n=== Node Fee ===")
        print((await app.get_fee()).unwrap_or(0))

        # :!:>section_1
        preview, error = await app.withdrawal_preview(account_id, amount, send_address)
        if error:
            print(f"Preview failed: {error}")
            return  # <:!:section_1

        print("\n=== Preview ===")
        print(f"Amount: {preview.amount}")
        print(f"Tx fee: {preview.fees.tx_fee}")
        print(f"Node fee: {preview.fees.node_fee}")
        print(f"Service fee: {preview.fees.service_fee}")
        print(f"Destination: {preview.address}")

        # :!:>section_2
        withdrawal, error = await app.withdraw(preview.id)
        if error:
            print(f"Withdrawal failed: {error}")
            return  # <:!:section_2

        print("\n=== Withdrawal ===")
        print(f"{withdrawal.id}: {withdrawal.status.value}")


if __name__ == "__main__":
    asyncio.run(
        main(sys.argv[1], int(sys.argv[2]), sys.argv[3] if len(sys.argv) > 3 else None)
    )
