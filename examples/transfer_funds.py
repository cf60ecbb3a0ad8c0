# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Account transfer example.

Creates two accounts, prints the deposit address of the first one and, once it
holds funds, transfers part of its unlocked balance to the second account.

Examples:
    Run against the app configured in the environment::

        python -m examples.transfer_funds

    Reuse an existing funded account as the sender::

        python -m examples.transfer_funds 8RgwiWmgiYKQlUHWGaTW
"""

import asyncio
import sys

from trtl_apps.async_client import ClientConfig, TrtlApp

from .common import API_BASE, APP_ID, APP_SECRET


async def main(sender_id=None):
    async with TrtlApp(ClientConfig(APP_ID, APP_SECRET, API_BASE)) as app:
        # :!:>section_1
        if sender_id is None:
            alice = (await app.create_account()).unwrap()
        else:
            alice = (await app.get_account(sender_id)).unwrap()
        bob = (await app.create_account()).unwrap()  # <:!:section_1

        print("\n=== Accounts ===")
        print(f"Alice: {alice.id}, deposit address: {alice.deposit_address}")
        print(f"Bob: {bob.id}")

        print("\n=== Initial Balances ===")
        print(f"Alice: {alice.balance_unlocked} (locked: {alice.balance_locked})")
        print(f"Bob: {bob.balance_unlocked}")

        if alice.balance_unlocked == 0:
            print(f"\nDeposit to {alice.deposit_address} and rerun with {alice.id}")
            return

        # :!:>section_2
        amount = max(alice.balance_unlocked // 10, 1)
        transfer, error = await app.transfer(alice.id, bob.id, amount)
        if error:
            print(f"Transfer failed: {error}")
            return  # <:!:section_2

        print(f"\nTransfer {transfer.id}: {transfer.total_amount} atomic units")

        print("\n=== Final Balances ===")
        alice, bob = await asyncio.gather(
            app.get_account(alice.id), app.get_account(bob.id)
        )
        print(f"Alice: {alice.unwrap().balance_unlocked}")
        print(f"Bob: {bob.unwrap().balance_unlocked}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
