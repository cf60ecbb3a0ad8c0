# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Error model shared by every TRTL Apps operation.

Every failure, whether detected locally before a request is sent or reported by
the remote service, is represented by a :class:`ServiceError` carrying a
machine-readable code and a human-readable message. The set of codes is closed
and namespaced by concern:

- ``service/*``: availability of the TRTL Apps service itself
- ``app/*``: the calling app and the accounts it owns
- ``request/*``: authentication and request shape
- ``transfer/*``: fund movements

Examples:
    Default message resolution::

        from trtl_apps.service_error import ServiceError, ServiceErrorCode

        error = ServiceError(ServiceErrorCode.NOT_INITIALIZED)
        print(error.message)  # "Service not initialized"

    Custom message::

        error = ServiceError("transfer/invalid-amount", "amount must be positive")
        print(error.message)  # "amount must be positive"

    Structured error body returned by the service::

        error = ServiceError.from_dict(
            {"errorCode": "app/user-not-found", "message": "App user not found"}
        )
"""

from __future__ import annotations

import unittest
from enum import Enum
from typing import Any, Dict, Optional, Union


class ServiceErrorCode(str, Enum):
    UNKNOWN_ERROR = "service/unknown-error"
    NOT_INITIALIZED = "service/not-initialized"
    SERVICE_HALTED = "service/service-halted"
    MASTER_WALLET_SYNC_FAILED = "service/master-wallet-sync-failed"

    INVALID_APP_NAME = "app/invalid-app-name"
    INVALID_APP_TYPE = "app/invalid-app-type"
    APP_NOT_FOUND = "app/app-not-found"
    APP_DISABLED = "app/app-disabled"
    CREATE_USER_FAILED = "app/create-user-failed"
    USER_NOT_FOUND = "app/user-not-found"
    ACCOUNT_NOT_FOUND = "app/account-not-found"
    INVALID_WITHDRAW_ADDRESS = "app/invalid-withdraw-address"
    PREPARED_WITHDRAWAL_NOT_FOUND = "app/prepared-withdrawal-not-found"

    UNAUTHORIZED = "request/unauthorized"
    INVALID_PARAMS = "request/invalid-params"

    INVALID_AMOUNT = "transfer/invalid-amount"
    INSUFFICIENT_FUNDS = "transfer/insufficient-funds"

    def __str__(self) -> str:
        return self.value


UNKNOWN_ERROR_MESSAGE = "An unknown error has occured."

_DEFAULT_MESSAGES: Dict[ServiceErrorCode, str] = {
    ServiceErrorCode.UNKNOWN_ERROR: UNKNOWN_ERROR_MESSAGE,
    ServiceErrorCode.NOT_INITIALIZED: "Service not initialized",
    ServiceErrorCode.SERVICE_HALTED: "Service is currently unavailable, please try again later.",
    ServiceErrorCode.MASTER_WALLET_SYNC_FAILED: "Failed to sync service master wallet.",
    ServiceErrorCode.INVALID_APP_NAME: "Invalid app name provided.",
    ServiceErrorCode.INVALID_APP_TYPE: "Invalid app type",
    ServiceErrorCode.APP_NOT_FOUND: "App not found.",
    ServiceErrorCode.APP_DISABLED: "App is currently disabled.",
    ServiceErrorCode.CREATE_USER_FAILED: "Failed to create app user.",
    ServiceErrorCode.USER_NOT_FOUND: "App user not found",
    ServiceErrorCode.ACCOUNT_NOT_FOUND: "App account not found.",
    ServiceErrorCode.INVALID_WITHDRAW_ADDRESS: "Invalid withdraw address.",
    ServiceErrorCode.PREPARED_WITHDRAWAL_NOT_FOUND: "Withdrawal preview not found or already used.",
    ServiceErrorCode.UNAUTHORIZED: "Unauthorized request.",
    ServiceErrorCode.INVALID_PARAMS: "Invalid request parameters provided",
    ServiceErrorCode.INVALID_AMOUNT: "Invalid amount specified in transfer request.",
    ServiceErrorCode.INSUFFICIENT_FUNDS: "Account has insufficient funds for transfer.",
}


def default_message(error_code: Union[ServiceErrorCode, str]) -> str:
    """Return the default text for an error code, never failing."""
    try:
        code = ServiceErrorCode(error_code)
    except ValueError:
        return UNKNOWN_ERROR_MESSAGE
    return _DEFAULT_MESSAGES.get(code, UNKNOWN_ERROR_MESSAGE)


class ServiceError(Exception):
    """A failure reported by, or on the way to, the TRTL Apps service.

    Instances are plain values: two errors with the same code and message
    compare equal. The class derives from ``Exception`` only so that
    ``Result.unwrap()`` can raise it; client operations return it inside an
    ``Err`` and never raise it themselves.

    Attributes:
        error_code: One of :class:`ServiceErrorCode`, or the raw string when
            the code is not part of the known taxonomy.
        message: The caller supplied message, or the default for the code.
    """

    error_code: Union[ServiceErrorCode, str]
    message: str

    def __init__(
        self,
        error_code: Union[ServiceErrorCode, str],
        custom_message: Optional[str] = None,
    ):
        try:
            self.error_code = ServiceErrorCode(error_code)
        except ValueError:
            self.error_code = error_code

        if custom_message is not None:
            self.message = custom_message
        else:
            self.message = default_message(self.error_code)
        super().__init__(self.message)

    @staticmethod
    def from_dict(data: Any) -> ServiceError:
        """Build an error from the service's JSON error body.

        The body is expected to look like ``{"errorCode": ..., "message": ...}``.
        Anything else maps to ``service/unknown-error``.
        """
        if not isinstance(data, dict):
            return ServiceError(ServiceErrorCode.UNKNOWN_ERROR)

        error_code = data.get("errorCode")
        if not isinstance(error_code, str) or not error_code:
            return ServiceError(ServiceErrorCode.UNKNOWN_ERROR)

        message = data.get("message")
        if not isinstance(message, str) or not message:
            message = None
        return ServiceError(error_code, message)

    def to_dict(self) -> Dict[str, str]:
        return {"errorCode": str(self.error_code), "message": self.message}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ServiceError):
            return NotImplemented
        return (
            str(self.error_code) == str(other.error_code)
            and self.message == other.message
        )

    def __hash__(self) -> int:
        return hash((str(self.error_code), self.message))

    def __repr__(self) -> str:
        return f"ServiceError({str(self.error_code)!r}, {self.message!r})"

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class Test(unittest.TestCase):
    def test_default_messages(self):
        for code in ServiceErrorCode:
            error = ServiceError(code)
            self.assertEqual(error.error_code, code)
            self.assertTrue(error.message)
            self.assertEqual(error.message, ServiceError(code).message)

        self.assertEqual(
            ServiceError(ServiceErrorCode.NOT_INITIALIZED).message,
            "Service not initialized",
        )

    def test_known_codes_do_not_fall_back(self):
        for code in ServiceErrorCode:
            if code is ServiceErrorCode.UNKNOWN_ERROR:
                continue
            self.assertNotEqual(default_message(code), UNKNOWN_ERROR_MESSAGE)

    def test_string_code(self):
        error = ServiceError("transfer/insufficient-funds")
        self.assertEqual(error.error_code, ServiceErrorCode.INSUFFICIENT_FUNDS)
        self.assertEqual(error.error_code, "transfer/insufficient-funds")

    def test_unknown_code(self):
        error = ServiceError("wallet/on-fire")
        self.assertEqual(error.error_code, "wallet/on-fire")
        self.assertEqual(error.message, UNKNOWN_ERROR_MESSAGE)
        self.assertEqual(default_message("wallet/on-fire"), UNKNOWN_ERROR_MESSAGE)

    def test_custom_message(self):
        for code in [ServiceErrorCode.INVALID_AMOUNT, "wallet/on-fire"]:
            error = ServiceError(code, "Amount must be a positive integer")
            self.assertEqual(error.message, "Amount must be a positive integer")

        self.assertEqual(ServiceError(ServiceErrorCode.UNAUTHORIZED, "").message, "")

    def test_from_dict(self):
        error = ServiceError.from_dict(
            {"errorCode": "app/user-not-found", "message": "no such user"}
        )
        self.assertEqual(error, ServiceError("app/user-not-found", "no such user"))

        error = ServiceError.from_dict({"errorCode": "app/app-disabled"})
        self.assertEqual(error.message, "App is currently disabled.")

        for body in [None, "Bad Gateway", [], {}, {"errorCode": 42}]:
            error = ServiceError.from_dict(body)
            self.assertEqual(error.error_code, ServiceErrorCode.UNKNOWN_ERROR)

    def test_to_dict(self):
        error = ServiceError(ServiceErrorCode.SERVICE_HALTED)
        self.assertEqual(
            error.to_dict(),
            {
                "errorCode": "service/service-halted",
                "message": "Service is currently unavailable, please try again later.",
            },
        )
        self.assertEqual(ServiceError.from_dict(error.to_dict()), error)

    def test_str(self):
        error = ServiceError(ServiceErrorCode.NOT_INITIALIZED)
        self.assertEqual(str(error), "service/not-initialized: Service not initialized")


if __name__ == "__main__":
    unittest.main()
