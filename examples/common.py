# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Common configuration for the TRTL Apps Python SDK examples.

Environment Variables:
    TRTL_APPS_APP_ID: App ID from the TRTL Apps developer console
    TRTL_APPS_APP_SECRET: App secret from the TRTL Apps developer console
    TRTL_APPS_API_BASE: URL of the TRTL Apps API (default: https://trtlapps.io/api)
"""

import os

# :!:>section_1
APP_ID = os.getenv("TRTL_APPS_APP_ID")

APP_SECRET = os.getenv("TRTL_APPS_APP_SECRET")

API_BASE = os.getenv("TRTL_APPS_API_BASE", "https://trtlapps.io/api")
# <:!:section_1
