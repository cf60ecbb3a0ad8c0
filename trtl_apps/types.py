# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Entities returned by the TRTL Apps service.

All entities are owned by the remote service; the client only ever holds the
copy obtained by a single call. Amounts are integers in atomic units.
"""

from __future__ import annotations

import unittest
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from typing_extensions import Protocol

E = TypeVar("E", bound="JsonEntity")


class JsonEntity(Protocol):
    """Anything that can be built from a JSON object returned by the service."""

    @classmethod
    def from_dict(cls: Type[E], data: Dict[str, Any]) -> E:
        ...


def _amount(data: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
    value = data.get(key, default)
    if value is None or isinstance(value, bool):
        raise ValueError(f"'{key}' must be an integer amount, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"'{key}' must be an integer amount, got {value!r}")
    return int(value)


class AccountsOrderBy(str, Enum):
    ACCOUNT_ID = "accountId"
    CREATED_AT = "createdAt"
    BALANCE_UNLOCKED = "balanceUnlocked"


@dataclass(frozen=True)
class Account:
    """An app account holding a balance on the service."""

    id: str
    app_id: str
    balance_unlocked: int
    balance_locked: int
    created_at: int
    deleted: bool
    payment_id: str
    deposit_address: str
    deposit_qr_code: str
    withdraw_address: Optional[str] = None
    data: Any = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Account:
        balance_unlocked = _amount(data, "balanceUnlocked", 0)
        balance_locked = _amount(data, "balanceLocked", 0)
        if balance_unlocked < 0 or balance_locked < 0:
            raise ValueError(
                f"Negative account balance: {balance_unlocked}, {balance_locked}"
            )
        return cls(
            id=data["id"],
            app_id=data.get("appId", ""),
            balance_unlocked=balance_unlocked,
            balance_locked=balance_locked,
            created_at=int(data.get("createdAt", 0)),
            deleted=bool(data.get("deleted", False)),
            payment_id=data.get("paymentId", ""),
            deposit_address=data.get("depositAddress", ""),
            deposit_qr_code=data.get("depositQrCode", ""),
            withdraw_address=data.get("withdrawAddress") or None,
            data=data.get("data"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "appId": self.app_id,
            "balanceUnlocked": self.balance_unlocked,
            "balanceLocked": self.balance_locked,
            "createdAt": self.created_at,
            "deleted": self.deleted,
            "paymentId": self.payment_id,
            "depositAddress": self.deposit_address,
            "depositQrCode": self.deposit_qr_code,
        }
        if self.withdraw_address is not None:
            result["withdrawAddress"] = self.withdraw_address
        if self.data is not None:
            result["data"] = self.data
        return result


class DepositStatus(str, Enum):
    """Deposit lifecycle, in the only order the service moves through it."""

    PENDING = "pending"
    CONFIRMING = "confirming"
    FINALIZING = "finalizing"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return list(DepositStatus).index(self)

    def can_transition_to(self, other: DepositStatus) -> bool:
        return other.rank >= self.rank


@dataclass(frozen=True)
class Deposit:
    id: str
    app_id: str
    account_id: str
    block_height: int
    amount: int
    deposit_address: str
    payment_id: str
    integrated_address: str
    status: DepositStatus
    tx_hash: Optional[str]
    created_date: int
    account_credited: bool
    last_update: int
    cancelled: bool = False
    expired: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Deposit:
        status = DepositStatus(data["status"])
        expired = bool(data.get("expired", False))
        if expired and status is DepositStatus.COMPLETED:
            raise ValueError(f"Deposit {data['id']} is both expired and completed")
        return cls(
            id=data["id"],
            app_id=data.get("appId", ""),
            account_id=data["accountId"],
            block_height=int(data.get("blockHeight", 0)),
            amount=_amount(data, "amount", 0),
            deposit_address=data.get("depositAddress", ""),
            payment_id=data.get("paymentId", ""),
            integrated_address=data.get("integratedAddress", ""),
            status=status,
            tx_hash=data.get("txHash") or None,
            created_date=int(data.get("createdDate", 0)),
            account_credited=bool(data.get("accountCredited", False)),
            last_update=int(data.get("lastUpdate", 0)),
            cancelled=bool(data.get("cancelled", False)),
            expired=expired,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "appId": self.app_id,
            "accountId": self.account_id,
            "blockHeight": self.block_height,
            "amount": self.amount,
            "depositAddress": self.deposit_address,
            "paymentId": self.payment_id,
            "integratedAddress": self.integrated_address,
            "status": self.status.value,
            "txHash": self.tx_hash,
            "createdDate": self.created_date,
            "accountCredited": self.account_credited,
            "lastUpdate": self.last_update,
            "cancelled": self.cancelled,
            "expired": self.expired,
        }


@dataclass(frozen=True)
class Recipient:
    account_id: str
    amount: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Recipient:
        return cls(account_id=data["accountId"], amount=_amount(data, "amount"))

    def to_dict(self) -> Dict[str, Any]:
        return {"accountId": self.account_id, "amount": self.amount}


@dataclass(frozen=True)
class Transfer:
    """A single-sender transfer to one or more recipients."""

    id: str
    app_id: str
    sender_id: str
    recipients: List[Recipient]
    timestamp: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Transfer:
        recipients = [Recipient.from_dict(r) for r in data.get("recipients", [])]
        if not recipients:
            raise ValueError(f"Transfer {data.get('id')} has no recipients")
        return cls(
            id=data["id"],
            app_id=data.get("appId", ""),
            sender_id=data["senderId"],
            recipients=recipients,
            timestamp=int(data.get("timestamp", 0)),
        )

    @property
    def total_amount(self) -> int:
        return sum(recipient.amount for recipient in self.recipients)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "appId": self.app_id,
            "senderId": self.sender_id,
            "recipients": [r.to_dict() for r in self.recipients],
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Fees:
    tx_fee: int = 0
    node_fee: int = 0
    service_fee: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Fees:
        fees = cls(
            tx_fee=_amount(data, "txFee", 0),
            node_fee=_amount(data, "nodeFee", 0),
            service_fee=_amount(data, "serviceFee", 0),
        )
        if min(fees.tx_fee, fees.node_fee, fees.service_fee) < 0:
            raise ValueError(f"Fees cannot be negative: {fees}")
        return fees

    @property
    def total(self) -> int:
        return self.tx_fee + self.node_fee + self.service_fee

    def to_dict(self) -> Dict[str, Any]:
        return {
            "txFee": self.tx_fee,
            "nodeFee": self.node_fee,
            "serviceFee": self.service_fee,
        }


@dataclass(frozen=True)
class WithdrawalPreview:
    """A fee quote for a withdrawal, redeemable once through ``withdraw``."""

    id: str
    app_id: str
    account_id: str
    amount: int
    fees: Fees
    address: str
    timestamp: int
    block_height: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WithdrawalPreview:
        return cls(
            id=data["id"],
            app_id=data.get("appId", ""),
            account_id=data["accountId"],
            amount=_amount(data, "amount"),
            fees=Fees.from_dict(data.get("fees") or {}),
            address=data.get("address", ""),
            timestamp=int(data.get("timestamp", 0)),
            block_height=int(data.get("blockHeight", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "appId": self.app_id,
            "accountId": self.account_id,
            "amount": self.amount,
            "fees": self.fees.to_dict(),
            "address": self.address,
            "timestamp": self.timestamp,
            "blockHeight": self.block_height,
        }


class WithdrawalStatus(str, Enum):
    PENDING = "pending"
    CONFIRMING = "confirming"
    FAULTY = "faulty"
    LOST = "lost"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Withdrawal:
    id: str
    payment_id: str
    app_id: str
    account_id: str
    amount: int
    fees: Fees
    address: str
    timestamp: int
    last_update: int
    status: WithdrawalStatus
    requested_at_block: int
    block_height: int
    failed: bool
    tx_hash: Optional[str] = None
    daemon_error_code: Optional[int] = None
    retries: int = 0
    prepared_withdrawal_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Withdrawal:
        failed = bool(data.get("failed", False))
        tx_hash = data.get("txHash") or None
        if failed and tx_hash is not None:
            raise ValueError(f"Failed withdrawal {data['id']} cannot have a tx hash")
        daemon_error_code = data.get("daemonErrorCode")
        return cls(
            id=data["id"],
            payment_id=data.get("paymentId", ""),
            app_id=data.get("appId", ""),
            account_id=data["accountId"],
            amount=_amount(data, "amount"),
            fees=Fees.from_dict(data.get("fees") or {}),
            address=data.get("address", ""),
            timestamp=int(data.get("timestamp", 0)),
            last_update=int(data.get("lastUpdate", 0)),
            status=WithdrawalStatus(data["status"]),
            requested_at_block=int(data.get("requestedAtBlock", 0)),
            block_height=int(data.get("blockHeight", 0)),
            failed=failed,
            tx_hash=tx_hash,
            daemon_error_code=(
                int(daemon_error_code) if daemon_error_code is not None else None
            ),
            retries=int(data.get("retries", 0)),
            prepared_withdrawal_id=data.get("preparedWithdrawalId"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "paymentId": self.payment_id,
            "appId": self.app_id,
            "accountId": self.account_id,
            "amount": self.amount,
            "fees": self.fees.to_dict(),
            "address": self.address,
            "timestamp": self.timestamp,
            "lastUpdate": self.last_update,
            "status": self.status.value,
            "requestedAtBlock": self.requested_at_block,
            "blockHeight": self.block_height,
            "failed": self.failed,
            "retries": self.retries,
        }
        if self.tx_hash is not None:
            result["txHash"] = self.tx_hash
        if self.daemon_error_code is not None:
            result["daemonErrorCode"] = self.daemon_error_code
        if self.prepared_withdrawal_id is not None:
            result["preparedWithdrawalId"] = self.prepared_withdrawal_id
        return result


class Test(unittest.TestCase):
    def test_account(self):
        account = Account.from_dict(
            {
                "id": "8RgwiWmgiYKQlUHWGaTW",
                "appId": "A1",
                "balanceUnlocked": 1500,
                "balanceLocked": 20,
                "createdAt": 1589138116000,
                "deleted": False,
                "paymentId": "0e4c5f6a",
                "depositAddress": "TRTLuxN6FVALYxeAEKhtWDYNS9Vd9",
                "depositQrCode": "https://chart.googleapis.com/qr",
                "unexpected": "ignored",
            }
        )
        self.assertEqual(account.balance_unlocked, 1500)
        self.assertEqual(account.balance_locked, 20)
        self.assertIsNone(account.withdraw_address)
        self.assertIsNone(account.data)
        self.assertNotIn("withdrawAddress", account.to_dict())
        self.assertEqual(Account.from_dict(account.to_dict()), account)

    def test_account_negative_balance(self):
        with self.assertRaises(ValueError):
            Account.from_dict({"id": "a", "balanceUnlocked": -1, "balanceLocked": 0})

    def test_amounts_are_integers(self):
        recipient = Recipient.from_dict({"accountId": "a", "amount": 22.0})
        self.assertEqual(recipient.amount, 22)
        self.assertIsInstance(recipient.amount, int)

        for amount in [1.5, True, None]:
            with self.assertRaises(ValueError):
                Recipient.from_dict({"accountId": "a", "amount": amount})

    def test_deposit_status(self):
        self.assertTrue(
            DepositStatus.PENDING.can_transition_to(DepositStatus.CONFIRMING)
        )
        self.assertTrue(
            DepositStatus.CONFIRMING.can_transition_to(DepositStatus.COMPLETED)
        )
        self.assertFalse(
            DepositStatus.COMPLETED.can_transition_to(DepositStatus.FINALIZING)
        )

    def test_deposit_expired_and_completed(self):
        data = {
            "id": "AE3AI1GNcOOz1qIz7rS1",
            "accountId": "8RgwiWmgiYKQlUHWGaTW",
            "amount": 100,
            "status": "completed",
            "expired": True,
        }
        with self.assertRaises(ValueError):
            Deposit.from_dict(data)

        data["status"] = "pending"
        deposit = Deposit.from_dict(data)
        self.assertTrue(deposit.expired)
        self.assertEqual(deposit.status, DepositStatus.PENDING)

    def test_transfer(self):
        transfer = Transfer.from_dict(
            {
                "id": "BxPoD2A7uyxZyMdl6ojn",
                "appId": "A1",
                "senderId": "8RgwiWmgiYKQlUHWGaTW",
                "recipients": [
                    {"accountId": "DawR7cEvQjEWMBVmMkkn", "amount": 22},
                    {"accountId": "rwszORa1qaSXK0RbZ7F5", "amount": 25},
                ],
                "timestamp": 1589138116000,
            }
        )
        self.assertEqual(transfer.total_amount, 47)
        self.assertEqual(transfer.recipients[1].account_id, "rwszORa1qaSXK0RbZ7F5")

        with self.assertRaises(ValueError):
            Transfer.from_dict({"id": "t", "senderId": "s", "recipients": []})

    def test_fees(self):
        fees = Fees.from_dict({"txFee": 10, "nodeFee": 5, "serviceFee": 1})
        self.assertEqual(fees.total, 16)
        self.assertEqual(Fees.from_dict({}), Fees())
        with self.assertRaises(ValueError):
            Fees.from_dict({"txFee": -10})

    def test_failed_withdrawal_has_no_tx_hash(self):
        data = {
            "id": "KTZ0ATzCUwgR6PMES0iD",
            "accountId": "8RgwiWmgiYKQlUHWGaTW",
            "amount": 21,
            "fees": {"txFee": 10, "nodeFee": 0, "serviceFee": 0},
            "status": "faulty",
            "failed": True,
            "txHash": "abcd",
        }
        with self.assertRaises(ValueError):
            Withdrawal.from_dict(data)

        del data["txHash"]
        withdrawal = Withdrawal.from_dict(data)
        self.assertTrue(withdrawal.failed)
        self.assertIsNone(withdrawal.tx_hash)
        self.assertEqual(withdrawal.status, WithdrawalStatus.FAULTY)
        self.assertEqual(withdrawal.fees.total, 10)


if __name__ == "__main__":
    unittest.main()
