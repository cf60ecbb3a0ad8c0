"""
TRTL Apps Python SDK Examples.

Example scripts demonstrating the TRTL Apps Python SDK against a live app.
They read the app credentials from the environment, see ``examples.common``.

Examples:
    - transfer_funds.py: Create two accounts and move funds between them
    - withdraw_funds.py: Quote and execute a withdrawal with a preview

Quick Start:
    Run an example from the repository root::

        export TRTL_APPS_APP_ID=YOUR_APP_ID
        export TRTL_APPS_APP_SECRET=YOUR_APP_SECRET

        python -m examples.transfer_funds
        python -m examples.withdraw_funds 8RgwiWmgiYKQlUHWGaTW 1000

Note:
    Transfers and withdrawals move real funds held by your app.
"""
