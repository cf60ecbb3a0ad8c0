# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Client identification for requests sent to the TRTL Apps API.

Every request made by :class:`trtl_apps.async_client.TrtlApp` carries a header
naming the SDK and its installed version, e.g. ``trtl-apps-python-sdk/0.3.0``.
"""

import importlib.metadata as metadata
import unittest

# Package name constant for metadata lookup
PACKAGE_NAME = "trtl-apps"


class Metadata:
    """Static helpers for the SDK identification header."""

    TRTL_APPS_HEADER = "x-trtl-apps-client"

    @staticmethod
    def get_trtl_apps_header_val() -> str:
        """Return ``trtl-apps-python-sdk/{version}``.

        Falls back to version ``0.0.0`` when the package metadata is not
        available, e.g. when running from a source checkout.
        """
        try:
            version = metadata.version(PACKAGE_NAME)
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        return f"trtl-apps-python-sdk/{version}"


class Test(unittest.TestCase):
    def test_header_val(self):
        header = Metadata.get_trtl_apps_header_val()
        self.assertTrue(header.startswith("trtl-apps-python-sdk/"))
        self.assertGreater(len(header), len("trtl-apps-python-sdk/"))


if __name__ == "__main__":
    unittest.main()
