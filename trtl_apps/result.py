# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Result type returned by every TRTL Apps client operation.

An operation yields either ``Ok(value)`` or ``Err(error)``, never both and never
neither. Both variants unpack into a ``(value, error)`` pair so callers can use
whichever style they prefer::

    result = await app.get_account("8RgwiWmgiYKQlUHWGaTW")
    if result.is_ok():
        print(result.value.balance_unlocked)

    account, error = await app.get_account("8RgwiWmgiYKQlUHWGaTW")
    if error:
        print(error.message)
"""

from __future__ import annotations

import unittest
from dataclasses import dataclass
from typing import Generic, Iterator, Optional, TypeVar, Union

from .service_error import ServiceError, ServiceErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """The operation succeeded with ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    @property
    def error(self) -> None:
        return None

    def __iter__(self) -> Iterator[Optional[T]]:
        return iter((self.value, None))


@dataclass(frozen=True)
class Err:
    """The operation failed with ``error``."""

    error: ServiceError

    def __post_init__(self):
        if not isinstance(self.error, ServiceError):
            raise TypeError(f"Err requires a ServiceError, got {type(self.error)}")

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    @property
    def value(self) -> None:
        return None

    def __iter__(self) -> Iterator[Optional[ServiceError]]:
        return iter((None, self.error))


Result = Union[Ok[T], Err]


class Test(unittest.TestCase):
    def test_ok(self):
        result: Result[int] = Ok(42)
        self.assertTrue(result.is_ok())
        self.assertFalse(result.is_err())
        self.assertEqual(result.unwrap(), 42)
        self.assertEqual(result.unwrap_or(0), 42)
        self.assertIsNone(result.error)

        value, error = result
        self.assertEqual(value, 42)
        self.assertIsNone(error)

    def test_ok_falsy_value(self):
        value, error = Ok(False)
        self.assertIs(value, False)
        self.assertIsNone(error)

    def test_err(self):
        service_error = ServiceError(ServiceErrorCode.NOT_INITIALIZED)
        result: Result[int] = Err(service_error)
        self.assertFalse(result.is_ok())
        self.assertTrue(result.is_err())
        self.assertEqual(result.unwrap_or(7), 7)
        self.assertIsNone(result.value)

        with self.assertRaises(ServiceError) as context:
            result.unwrap()
        self.assertIs(context.exception, service_error)

        value, error = result
        self.assertIsNone(value)
        self.assertIs(error, service_error)

    def test_err_requires_service_error(self):
        with self.assertRaises(TypeError):
            Err(None)  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            Err("service/unknown-error")  # type: ignore[arg-type]

    def test_equality(self):
        self.assertEqual(Ok(1), Ok(1))
        self.assertEqual(
            Err(ServiceError("request/unauthorized")),
            Err(ServiceError("request/unauthorized")),
        )
        self.assertNotEqual(Ok(None), Err(ServiceError("request/unauthorized")))


if __name__ == "__main__":
    unittest.main()
