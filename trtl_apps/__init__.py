# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
TRTL Apps Python SDK - An async client library for the TRTL Apps wallet service.

TRTL Apps hosts TurtleCoin wallets for apps. An app creates accounts, each with
its own deposit address, moves funds between them with transfers, and pays out
to external addresses with withdrawals. This SDK wraps the TRTL Apps REST API.

Core Features:
- **Accounts**: Create and look up app accounts, set withdraw addresses
- **Deposits**: Track incoming payments credited to accounts
- **Transfers**: Move funds from one account to one or many others
- **Withdrawals**: Quote fees with a preview, then execute the withdrawal
- **Typed Results**: Every call returns ``Ok(value)`` or ``Err(ServiceError)``

Quick Start:
    Basic account and transfer operations::

        import asyncio
        from trtl_apps.async_client import ClientConfig, TrtlApp

        async def main():
            app = TrtlApp(ClientConfig("YOUR_APP_ID", "YOUR_APP_SECRET"))

            alice, error = await app.create_account()
            bob, error = await app.create_account()

            transfer, error = await app.transfer(alice.id, bob.id, 42)
            if error:
                print(f"Transfer failed: {error.message}")

            await app.close()

        asyncio.run(main())

Module Organization:
    - **async_client**: ``TrtlApp`` client and ``ClientConfig``
    - **types**: Account, Deposit, Transfer, Withdrawal and related entities
    - **result**: ``Ok`` / ``Err`` result type
    - **service_error**: ``ServiceError`` and the error code taxonomy
    - **metadata**: SDK version and client identification header
    - **cli**: Command line access to the client

Configuration:
    Environment Variables:
    - **TRTL_APPS_APP_ID**: App ID from the developer console
    - **TRTL_APPS_APP_SECRET**: App secret from the developer console
    - **TRTL_APPS_API_BASE**: Override of https://trtlapps.io/api

Requirements:
    - Python 3.8 or higher
    - httpx for HTTP requests

License:
    Apache License 2.0
"""
