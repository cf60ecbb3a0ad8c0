# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Asynchronous client for the TRTL Apps wallet service.

TRTL Apps hosts custodial TurtleCoin wallets on behalf of apps. An app owns
accounts; each account has a deposit address, an unlocked and a locked balance,
and optionally a withdraw address. Funds move between accounts through
transfers and leave the service through withdrawals.

Every operation of :class:`TrtlApp` performs exactly one HTTP request and
returns a :class:`~trtl_apps.result.Result`: ``Ok(value)`` on success or
``Err(ServiceError)`` on failure. No exception crosses the client boundary:

- calling an operation before :meth:`TrtlApp.initialize` yields
  ``service/not-initialized`` without touching the network
- malformed arguments (empty ids, non-positive or non-integer amounts) yield
  ``request/invalid-params`` or ``transfer/invalid-amount`` without touching
  the network
- a non-success response yields the structured error the service returned
- a transport failure or an unreadable body yields ``service/unknown-error``

Examples:
    Create an account and fund another one::

        import asyncio
        from trtl_apps.async_client import ClientConfig, TrtlApp

        async def main():
            async with TrtlApp(ClientConfig("YOUR_APP_ID", "YOUR_APP_SECRET")) as app:
                account, error = await app.create_account()
                if error:
                    print(f"{error.error_code}: {error.message}")
                    return
                print(f"Deposit to {account.deposit_address}")

                transfer, error = await app.transfer(
                    "8RgwiWmgiYKQlUHWGaTW", account.id, 42
                )

        asyncio.run(main())

    Two-phase withdrawal::

        preview = await app.withdrawal_preview("8RgwiWmgiYKQlUHWGaTW", 1000)
        if preview.is_ok():
            print(f"Total fees: {preview.value.fees.total}")
            withdrawal = (await app.withdraw(preview.value.id)).unwrap()

Note:
    All amounts are integers in atomic units (1 TRTL = 100 atomic units).
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import unittest
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Type,
    TypeVar,
    Union,
)
from urllib.parse import quote

import httpx

from .metadata import Metadata
from .result import Err, Ok, Result
from .service_error import ServiceError, ServiceErrorCode
from .types import (
    Account,
    AccountsOrderBy,
    Deposit,
    JsonEntity,
    Recipient,
    Transfer,
    Withdrawal,
    WithdrawalPreview,
)

T = TypeVar("T")
E = TypeVar("E", bound=JsonEntity)

DEFAULT_API_BASE = "https://trtlapps.io/api"

APP_ID_ENV = "TRTL_APPS_APP_ID"
APP_SECRET_ENV = "TRTL_APPS_APP_SECRET"
API_BASE_ENV = "TRTL_APPS_API_BASE"


@dataclass
class ClientConfig:
    """Identity and transport settings for a :class:`TrtlApp`.

    Attributes:
        app_id: The app ID from the TRTL Apps developer console.
        app_secret: The app secret, sent as a bearer token on every request.
        api_base: Base URL of the TRTL Apps API (default: https://trtlapps.io/api).
        http2: Enable HTTP/2 (default: True).
        timeout: Request timeout in seconds (default: 60).

    Examples:
        Explicit credentials::

            config = ClientConfig("YOUR_APP_ID", "YOUR_APP_SECRET")

        From the environment (TRTL_APPS_APP_ID, TRTL_APPS_APP_SECRET and
        optionally TRTL_APPS_API_BASE)::

            config = ClientConfig.from_env()
    """

    app_id: Optional[str] = None
    app_secret: Optional[str] = None
    api_base: str = DEFAULT_API_BASE
    http2: bool = True
    timeout: float = 60.0

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
        environ = os.environ if environ is None else environ
        return ClientConfig(
            app_id=environ.get(APP_ID_ENV) or None,
            app_secret=environ.get(APP_SECRET_ENV) or None,
            api_base=environ.get(API_BASE_ENV) or DEFAULT_API_BASE,
        )


def _not_initialized() -> Err:
    return Err(ServiceError(ServiceErrorCode.NOT_INITIALIZED))


def _invalid_params(message: str) -> Err:
    return Err(ServiceError(ServiceErrorCode.INVALID_PARAMS, message))


def _invalid_amount(amount: Any) -> Err:
    return Err(
        ServiceError(
            ServiceErrorCode.INVALID_AMOUNT,
            f"Amount must be a positive integer in atomic units, got {amount!r}.",
        )
    )


def _is_amount(amount: Any) -> bool:
    return isinstance(amount, int) and not isinstance(amount, bool) and amount > 0


def _segment(value: str) -> str:
    return quote(value, safe="")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unexpected JSON constant {name}")


def _require(data: Any, kind: type) -> Any:
    if not isinstance(data, kind):
        raise TypeError(f"Expected a JSON {kind.__name__}, got {type(data).__name__}")
    return data


def _parse_entity(entity: Type[E]) -> Callable[[Any], E]:
    return lambda data: entity.from_dict(_require(data, dict))


def _parse_field(key: str, kind: type) -> Callable[[Any], Any]:
    return lambda data: _require(_require(data, dict)[key], kind)


def _parse_fee(data: Any) -> int:
    fee = _require(data, dict)["fee"]
    if isinstance(fee, bool) or not isinstance(fee, (int, float)) or fee != int(fee):
        raise ValueError(f"fee must be an integer, got {fee!r}")
    return int(fee)


def _parse_list(entity: Type[E]) -> Callable[[Any], List[E]]:
    return lambda data: [
        entity.from_dict(_require(item, dict)) for item in _require(data, list)
    ]


class TrtlApp:
    """Async client for a single TRTL Apps app.

    The client holds the app's identity and one ``httpx.AsyncClient``. Configure
    it once, either by passing a :class:`ClientConfig` with credentials or by
    calling :meth:`initialize`, then share the instance between tasks.
    Re-initializing while requests are in flight is not supported.

    Attributes:
        client: Underlying HTTP client
        client_config: Active configuration
    """

    client: httpx.AsyncClient
    client_config: ClientConfig

    def __init__(
        self,
        client_config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        :param client_config: Identity and transport settings. When it carries an
            app id and secret the client is initialized right away.
        :param transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
        """
        self.client_config = dataclasses.replace(client_config or ClientConfig())
        # Default timeouts but no pool timeout, requests wait for a free connection.
        timeout = httpx.Timeout(self.client_config.timeout, pool=None)
        headers = {Metadata.TRTL_APPS_HEADER: Metadata.get_trtl_apps_header_val()}
        self.client = httpx.AsyncClient(
            http2=self.client_config.http2,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )
        self._initialized = False
        if self.client_config.app_id and self.client_config.app_secret:
            self.initialize(
                self.client_config.app_id,
                self.client_config.app_secret,
                self.client_config.api_base,
            )

    async def __aenter__(self) -> TrtlApp:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def initialize(
        self, app_id: str, app_secret: str, api_base: Optional[str] = None
    ) -> None:
        """
        Set the app identity used by every subsequent call.

        Calling it again replaces the previous identity.

        :param app_id: The ID of the app.
        :param app_secret: The secret key of the app.
        :param api_base: Optional override of the API base URL.
        :raises ValueError: If the app id or secret is empty.
        """
        if not app_id:
            raise ValueError("app_id must not be empty")
        if not app_secret:
            raise ValueError("app_secret must not be empty")

        self.client_config.app_id = app_id
        self.client_config.app_secret = app_secret
        if api_base:
            self.client_config.api_base = api_base
        self.client_config.api_base = self.client_config.api_base.rstrip("/")
        self.client.headers["Authorization"] = f"Bearer {app_secret}"
        self._initialized = True

    def is_initialized(self) -> bool:
        """
        Whether the client holds an app identity and can reach the service.

        :return: True once ``initialize`` has succeeded.
        """
        return self._initialized

    @property
    def app_id(self) -> Optional[str]:
        return self.client_config.app_id

    async def close(self):
        """Close the underlying HTTP client."""
        await self.client.aclose()

    #
    # Accounts
    #

    async def create_account(self) -> Result[Account]:
        """
        Create a new app account with zero balances and a fresh deposit address.

        :return: The newly created account.
        """
        if not self._initialized:
            return _not_initialized()
        return await self._post(f"{self._app}/accounts", _parse_entity(Account))

    async def get_account(self, account_id: str) -> Result[Account]:
        """
        Fetch an existing app account.

        :param account_id: The ID of the account to retrieve.
        :return: The account, or the service error if it does not exist.
        """
        if not self._initialized:
            return _not_initialized()
        if not account_id:
            return _invalid_params("account_id is required.")
        return await self._get(
            f"{self._app}/accounts/{_segment(account_id)}", _parse_entity(Account)
        )

    async def get_accounts(
        self,
        order_by: Union[AccountsOrderBy, str] = AccountsOrderBy.CREATED_AT,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
    ) -> Result[List[Account]]:
        """
        List the app's accounts, one page at a time.

        :param order_by: Property to order the accounts by.
        :param limit: The max amount of accounts to retrieve.
        :param start_after: Only return accounts after this account id.
        :return: A page of accounts.
        """
        if not self._initialized:
            return _not_initialized()
        try:
            order_by = AccountsOrderBy(order_by)
        except ValueError:
            return _invalid_params(f"Unsupported order_by value: {order_by!r}.")
        if limit is not None and not _is_amount(limit):
            return _invalid_params(f"limit must be a positive integer, got {limit!r}.")

        return await self._get(
            f"{self._app}/accounts",
            _parse_list(Account),
            params={
                "orderBy": order_by.value,
                "limit": limit,
                "startAfter": start_after,
            },
        )

    async def set_withdraw_address(self, account_id: str, address: str) -> Result[str]:
        """
        Set the address withdrawals from this account are sent to.

        The address is validated by the service; an invalid address yields
        ``app/invalid-withdraw-address``.

        :return: The withdraw address now set on the account.
        """
        if not self._initialized:
            return _not_initialized()
        if not account_id:
            return _invalid_params("account_id is required.")
        if not address:
            return _invalid_params("address is required.")

        return await self._put(
            f"{self._app}/accounts/{_segment(account_id)}/withdrawaddress",
            _parse_field("withdrawAddress", str),
            data={"address": address},
        )

    #
    # Deposits
    #

    async def get_deposit(self, deposit_id: str) -> Result[Deposit]:
        """
        Fetch a deposit credited to one of the app's accounts.

        :param deposit_id: The ID of the deposit to retrieve.
        :return: The deposit with its current confirmation status.
        """
        if not self._initialized:
            return _not_initialized()
        if not deposit_id:
            return _invalid_params("deposit_id is required.")
        return await self._get(
            f"{self._app}/deposits/{_segment(deposit_id)}", _parse_entity(Deposit)
        )

    #
    # Transfers
    #

    async def transfer(
        self, sender_id: str, receiver_id: str, amount: int
    ) -> Result[Transfer]:
        """
        Transfer funds from one account to another.

        :param sender_id: The id of the account sending the funds.
        :param receiver_id: The receiving account's id.
        :param amount: The amount to transfer in atomic units.
        :return: The transfer, or ``transfer/insufficient-funds`` if the sender's
            unlocked balance does not cover the amount.
        """
        if not self._initialized:
            return _not_initialized()
        return await self.transfer_many(sender_id, [Recipient(receiver_id, amount)])

    async def transfer_many(
        self,
        sender_id: str,
        recipients: Sequence[Union[Recipient, Dict[str, Any]]],
    ) -> Result[Transfer]:
        """
        Transfer funds from one account to one or more recipients.

        Recipients may be :class:`~trtl_apps.types.Recipient` instances or dicts
        of the form ``{"accountId": ..., "amount": ...}``.
        """
        if not self._initialized:
            return _not_initialized()
        if not sender_id:
            return _invalid_params("sender_id is required.")
        if not recipients:
            return _invalid_params("At least one recipient is required.")

        body = []
        for recipient in recipients:
            if isinstance(recipient, dict):
                account_id = recipient.get("accountId")
                amount = recipient.get("amount")
            else:
                account_id = recipient.account_id
                amount = recipient.amount
            if not account_id:
                return _invalid_params("Every recipient needs an account id.")
            if not _is_amount(amount):
                return _invalid_amount(amount)
            body.append({"accountId": account_id, "amount": amount})

        return await self._post(
            f"{self._app}/transfers",
            _parse_entity(Transfer),
            data={"senderId": sender_id, "recipients": body},
        )

    async def get_transfer(self, transfer_id: str) -> Result[Transfer]:
        """
        Fetch a completed transfer.

        :param transfer_id: The ID of the transfer to retrieve.
        :return: The transfer with its sender and recipients.
        """
        if not self._initialized:
            return _not_initialized()
        if not transfer_id:
            return _invalid_params("transfer_id is required.")
        return await self._get(
            f"{self._app}/transfers/{_segment(transfer_id)}", _parse_entity(Transfer)
        )

    #
    # Withdrawals
    #

    async def get_fee(self) -> Result[int]:
        """
        Fetch the current node fee charged on withdrawals, in atomic units.
        """
        if not self._initialized:
            return _not_initialized()
        return await self._get("service/nodefee", _parse_fee)

    async def withdrawal_preview(
        self, account_id: str, amount: int, send_address: Optional[str] = None
    ) -> Result[WithdrawalPreview]:
        """
        Quote the fees of a withdrawal without moving any funds.

        The returned preview's id is redeemed with :meth:`withdraw`.

        :param account_id: The id of the account withdrawing funds.
        :param amount: The amount to withdraw in atomic units.
        :param send_address: Optional destination; defaults to the account's
            withdraw address.
        """
        if not self._initialized:
            return _not_initialized()
        if not account_id:
            return _invalid_params("account_id is required.")
        if not _is_amount(amount):
            return _invalid_amount(amount)

        body: Dict[str, Any] = {"accountId": account_id, "amount": amount}
        if send_address:
            body["sendAddress"] = send_address

        return await self._post(
            f"{self._app}/prepared_withdrawals",
            _parse_entity(WithdrawalPreview),
            data=body,
        )

    async def withdraw(self, preview_id: str) -> Result[Withdrawal]:
        """
        Execute a withdrawal previously quoted by :meth:`withdrawal_preview`.

        A preview can be redeemed once. Unknown or already used preview ids are
        rejected by the service.

        :param preview_id: The id of the withdrawal preview.
        """
        if not self._initialized:
            return _not_initialized()
        if not preview_id:
            return _invalid_params("preview_id is required.")
        return await self._post(
            f"{self._app}/withdrawals",
            _parse_entity(Withdrawal),
            data={"preparedWithdrawalId": preview_id},
        )

    async def get_withdrawal(self, withdrawal_id: str) -> Result[Withdrawal]:
        """
        Fetch a withdrawal and its progress towards the destination address.

        :param withdrawal_id: The ID of the withdrawal to retrieve.
        :return: The withdrawal with its current status.
        """
        if not self._initialized:
            return _not_initialized()
        if not withdrawal_id:
            return _invalid_params("withdrawal_id is required.")
        return await self._get(
            f"{self._app}/withdrawals/{_segment(withdrawal_id)}",
            _parse_entity(Withdrawal),
        )

    #
    # Service
    #

    async def validate_address(
        self, address: str, allow_integrated: bool = True
    ) -> Result[bool]:
        """
        Ask the service whether ``address`` is a valid TurtleCoin address.

        :param address: The address to check.
        :param allow_integrated: Whether integrated addresses count as valid.
        """
        if not self._initialized:
            return _not_initialized()
        if not address:
            return _invalid_params("address is required.")
        return await self._post(
            "service/validateaddress",
            _parse_field("valid", bool),
            data={"address": address, "allowIntegrated": allow_integrated},
        )

    #
    # Transport
    #

    @property
    def _app(self) -> str:
        return _segment(self.client_config.app_id or "")

    async def _get(
        self,
        endpoint: str,
        parse: Callable[[Any], T],
        params: Optional[Dict[str, Any]] = None,
    ) -> Result[T]:
        return await self._request("GET", endpoint, parse, params=params)

    async def _post(
        self,
        endpoint: str,
        parse: Callable[[Any], T],
        data: Optional[Dict[str, Any]] = None,
    ) -> Result[T]:
        return await self._request("POST", endpoint, parse, data=data)

    async def _put(
        self,
        endpoint: str,
        parse: Callable[[Any], T],
        data: Optional[Dict[str, Any]] = None,
    ) -> Result[T]:
        return await self._request("PUT", endpoint, parse, data=data)

    async def _request(
        self,
        method: str,
        endpoint: str,
        parse: Callable[[Any], T],
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Result[T]:
        # format params:
        params = {} if params is None else params
        params = {key: val for key, val in params.items() if val is not None}
        url = f"{self.client_config.api_base}/{endpoint}"

        logging.debug(f"{method} {url}")
        try:
            response = await self.client.request(
                method, url, params=params or None, json=data
            )
        except httpx.HTTPError as e:
            logging.error(e, exc_info=True)
            return Err(ServiceError(ServiceErrorCode.UNKNOWN_ERROR))

        if response.status_code >= 400:
            logging.warning(f"{method} {url} failed: {response.status_code}")
            try:
                body = response.json()
            except ValueError:
                body = None
            return Err(ServiceError.from_dict(body))

        try:
            body = json.loads(response.content, parse_constant=_reject_constant)
            return Ok(parse(body))
        except (AttributeError, KeyError, OverflowError, TypeError, ValueError) as e:
            logging.error(f"Unexpected response for {method} {url}: {e!r}")
            return Err(ServiceError(ServiceErrorCode.UNKNOWN_ERROR))


class Test(unittest.IsolatedAsyncioTestCase):
    ACCOUNT = {
        "id": "8RgwiWmgiYKQlUHWGaTW",
        "appId": "A1",
        "balanceUnlocked": 0,
        "balanceLocked": 0,
        "createdAt": 1589138116000,
        "deleted": False,
        "paymentId": "0e4c5f6a38b1f2b3",
        "depositAddress": "TRTLuxN6FVALYxeAEKhtWDYNS9Vd9",
        "depositQrCode": "https://chart.googleapis.com/qr",
    }

    PREVIEW = {
        "id": "uOw2KOPWpbLEzDahZWoR",
        "appId": "A1",
        "accountId": "8RgwiWmgiYKQlUHWGaTW",
        "amount": 1000,
        "fees": {"txFee": 10, "nodeFee": 5, "serviceFee": 0},
        "address": "TRTLv32bGBP2cfM3SdijU4TTYnCPoR33g5eTas6n9HamBvu8ozc9",
        "timestamp": 1589138116000,
        "blockHeight": 2500000,
    }

    WITHDRAWAL = {
        "id": "KTZ0ATzCUwgR6PMES0iD",
        "paymentId": "a51f2f5b",
        "appId": "A1",
        "accountId": "8RgwiWmgiYKQlUHWGaTW",
        "amount": 1000,
        "fees": {"txFee": 10, "nodeFee": 5, "serviceFee": 0},
        "address": "TRTLv32bGBP2cfM3SdijU4TTYnCPoR33g5eTas6n9HamBvu8ozc9",
        "timestamp": 1589138116000,
        "lastUpdate": 1589138116000,
        "status": "pending",
        "requestedAtBlock": 2500000,
        "blockHeight": 0,
        "failed": False,
        "retries": 0,
        "preparedWithdrawalId": "uOw2KOPWpbLEzDahZWoR",
    }

    def setUp(self):
        self.requests: List[httpx.Request] = []
        self.responses: Dict[Any, Any] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        response = self.responses.get(key)
        if response is None:
            return httpx.Response(
                404, json={"errorCode": "request/invalid-params", "message": str(key)}
            )
        if isinstance(response, Exception):
            raise response
        return response

    def make_app(self, initialized: bool = True) -> TrtlApp:
        config = ClientConfig("A1", "S1") if initialized else ClientConfig()
        app = TrtlApp(config, transport=httpx.MockTransport(self.handler))
        self.addAsyncCleanup(app.close)
        return app

    def operations(self, app: TrtlApp):
        return [
            app.create_account(),
            app.get_account("acc1"),
            app.get_accounts(),
            app.get_deposit("dep1"),
            app.set_withdraw_address("acc1", "TRTLv32bGBP2cfM3"),
            app.transfer("acc1", "acc2", 42),
            app.transfer_many("acc1", [Recipient("acc2", 22)]),
            app.get_transfer("tr1"),
            app.get_fee(),
            app.withdrawal_preview("acc1", 1000),
            app.withdraw("prev1"),
            app.get_withdrawal("wd1"),
            app.validate_address("TRTLv32bGBP2cfM3"),
        ]

    async def test_not_initialized(self):
        app = self.make_app(initialized=False)
        self.assertFalse(app.is_initialized())

        for operation in self.operations(app):
            value, error = await operation
            self.assertIsNone(value)
            self.assertEqual(error.error_code, ServiceErrorCode.NOT_INITIALIZED)
        self.assertEqual(self.requests, [])

    async def test_get_fee_not_initialized(self):
        app = self.make_app(initialized=False)
        result = await app.get_fee()
        self.assertEqual(result, Err(ServiceError("service/not-initialized")))
        self.assertEqual(self.requests, [])

    async def test_result_xor_error(self):
        app = self.make_app()
        for operation in self.operations(app):
            value, error = await operation
            self.assertTrue((value is None) != (error is None))

    async def test_create_account(self):
        self.responses[("POST", "/api/A1/accounts")] = httpx.Response(
            200, json=self.ACCOUNT
        )
        app = self.make_app()

        account, error = await app.create_account()
        self.assertIsNone(error)
        self.assertEqual(account.balance_unlocked, 0)
        self.assertEqual(account.balance_locked, 0)
        self.assertFalse(account.deleted)
        self.assertTrue(account.deposit_address)
        self.assertIsNone(account.withdraw_address)

        self.assertEqual(len(self.requests), 1)
        request = self.requests[0]
        self.assertEqual(str(request.url), "https://trtlapps.io/api/A1/accounts")
        self.assertEqual(request.headers["Authorization"], "Bearer S1")
        self.assertIn(Metadata.TRTL_APPS_HEADER, request.headers)

    async def test_get_account_not_found(self):
        self.responses[("GET", "/api/A1/accounts/missing")] = httpx.Response(
            404, json={"errorCode": "app/account-not-found"}
        )
        app = self.make_app()

        result = await app.get_account("missing")
        self.assertTrue(result.is_err())
        self.assertEqual(result.error.error_code, ServiceErrorCode.ACCOUNT_NOT_FOUND)
        self.assertEqual(result.error.message, "App account not found.")

    async def test_get_accounts(self):
        self.responses[("GET", "/api/A1/accounts")] = httpx.Response(
            200, json=[self.ACCOUNT, dict(self.ACCOUNT, id="EWshpvxky57RrAeBCf8Z")]
        )
        app = self.make_app()

        accounts = (await app.get_accounts("balanceUnlocked", limit=2)).unwrap()
        self.assertEqual(
            [a.id for a in accounts], [self.ACCOUNT["id"], "EWshpvxky57RrAeBCf8Z"]
        )
        params = self.requests[0].url.params
        self.assertEqual(params["orderBy"], "balanceUnlocked")
        self.assertEqual(params["limit"], "2")
        self.assertNotIn("startAfter", params)

        for kwargs in [{"order_by": "balance"}, {"limit": 0}, {"limit": -3}]:
            value, error = await app.get_accounts(**kwargs)
            self.assertIsNone(value)
            self.assertEqual(error.error_code, ServiceErrorCode.INVALID_PARAMS)
        self.assertEqual(len(self.requests), 1)

    async def test_set_withdraw_address(self):
        address = "TRTLv32bGBP2cfM3SdijU4TTYnCPoR33g5eTas6n9HamBvu8ozc9"
        self.responses[("PUT", "/api/A1/accounts/acc1/withdrawaddress")] = (
            httpx.Response(200, json={"withdrawAddress": address})
        )
        app = self.make_app()

        result = await app.set_withdraw_address("acc1", address)
        self.assertEqual(result, Ok(address))
        self.assertEqual(json.loads(self.requests[0].content), {"address": address})

    async def test_set_withdraw_address_rejected(self):
        self.responses[("PUT", "/api/A1/accounts/acc1/withdrawaddress")] = (
            httpx.Response(
                400,
                json={
                    "errorCode": "app/invalid-withdraw-address",
                    "message": "bad-address is not a valid address",
                },
            )
        )
        app = self.make_app()

        value, error = await app.set_withdraw_address("acc1", "bad-address")
        self.assertIsNone(value)
        self.assertEqual(error.error_code, ServiceErrorCode.INVALID_WITHDRAW_ADDRESS)
        self.assertEqual(error.message, "bad-address is not a valid address")

    async def test_transfer(self):
        transfer = {
            "id": "BxPoD2A7uyxZyMdl6ojn",
            "appId": "A1",
            "senderId": "acc1",
            "recipients": [{"accountId": "acc2", "amount": 42}],
            "timestamp": 1589138116000,
        }
        self.responses[("POST", "/api/A1/transfers")] = httpx.Response(
            200, json=transfer
        )
        app = self.make_app()

        result = await app.transfer("acc1", "acc2", 42)
        self.assertEqual(result.unwrap().total_amount, 42)
        self.assertEqual(
            json.loads(self.requests[0].content),
            {"senderId": "acc1", "recipients": [{"accountId": "acc2", "amount": 42}]},
        )

    async def test_transfer_many(self):
        recipients = [
            {"accountId": "DawR7cEvQjEWMBVmMkkn", "amount": 22},
            {"accountId": "rwszORa1qaSXK0RbZ7F5", "amount": 25},
        ]
        self.responses[("POST", "/api/A1/transfers")] = httpx.Response(
            200,
            json={
                "id": "BxPoD2A7uyxZyMdl6ojn",
                "senderId": "acc1",
                "recipients": recipients,
                "timestamp": 1589138116000,
            },
        )
        app = self.make_app()

        transfer, error = await app.transfer_many(
            "acc1", [recipients[0], Recipient("rwszORa1qaSXK0RbZ7F5", 25)]
        )
        self.assertIsNone(error)
        self.assertEqual(len(transfer.recipients), 2)
        self.assertEqual(json.loads(self.requests[0].content)["recipients"], recipients)

    async def test_transfer_invalid_amount(self):
        app = self.make_app()
        for amount in [0, -5, 1.5, True, "10", None]:
            value, error = await app.transfer("acc1", "acc2", amount)  # type: ignore
            self.assertIsNone(value)
            self.assertEqual(error.error_code, ServiceErrorCode.INVALID_AMOUNT)

        value, error = await app.transfer_many("acc1", [])
        self.assertEqual(error.error_code, ServiceErrorCode.INVALID_PARAMS)
        value, error = await app.transfer_many("acc1", [{"amount": 5}])
        self.assertEqual(error.error_code, ServiceErrorCode.INVALID_PARAMS)
        self.assertEqual(self.requests, [])

    async def test_transfer_insufficient_funds(self):
        self.responses[("POST", "/api/A1/transfers")] = httpx.Response(
            400, json={"errorCode": "transfer/insufficient-funds"}
        )
        app = self.make_app()

        value, error = await app.transfer("acc1", "acc2", 10**12)
        self.assertIsNone(value)
        self.assertEqual(error, ServiceError(ServiceErrorCode.INSUFFICIENT_FUNDS))

    async def test_get_fee(self):
        self.responses[("GET", "/api/service/nodefee")] = httpx.Response(
            200, json={"fee": 10}
        )
        app = self.make_app()
        self.assertEqual(await app.get_fee(), Ok(10))

    async def test_two_phase_withdrawal(self):
        self.responses[("POST", "/api/A1/prepared_withdrawals")] = httpx.Response(
            200, json=self.PREVIEW
        )
        self.responses[("POST", "/api/A1/withdrawals")] = httpx.Response(
            200, json=self.WITHDRAWAL
        )
        self.responses[("GET", "/api/A1/withdrawals/KTZ0ATzCUwgR6PMES0iD")] = (
            httpx.Response(
                200, json=dict(self.WITHDRAWAL, status="completed", txHash="ab12")
            )
        )
        app = self.make_app()

        preview = (await app.withdrawal_preview("acc1", 1000, "TRTLv32b")).unwrap()
        self.assertEqual(preview.fees.total, 15)
        self.assertEqual(
            json.loads(self.requests[0].content),
            {"accountId": "acc1", "amount": 1000, "sendAddress": "TRTLv32b"},
        )

        withdrawal = (await app.withdraw(preview.id)).unwrap()
        self.assertEqual(withdrawal.prepared_withdrawal_id, preview.id)
        self.assertEqual(
            json.loads(self.requests[1].content), {"preparedWithdrawalId": preview.id}
        )

        withdrawal = (await app.get_withdrawal(withdrawal.id)).unwrap()
        self.assertEqual(withdrawal.tx_hash, "ab12")

    async def test_withdraw_unknown_preview(self):
        self.responses[("POST", "/api/A1/withdrawals")] = httpx.Response(
            404, json={"errorCode": "app/prepared-withdrawal-not-found"}
        )
        app = self.make_app()

        value, error = await app.withdraw("never-returned")
        self.assertIsNone(value)
        self.assertEqual(
            error.error_code, ServiceErrorCode.PREPARED_WITHDRAWAL_NOT_FOUND
        )

        value, error = await app.withdrawal_preview("acc1", 0)
        self.assertEqual(error.error_code, ServiceErrorCode.INVALID_AMOUNT)
        self.assertEqual(len(self.requests), 1)

    async def test_validate_address(self):
        self.responses[("POST", "/api/service/validateaddress")] = httpx.Response(
            200, json={"valid": False}
        )
        app = self.make_app()

        self.assertEqual(await app.validate_address("TRTLnope", False), Ok(False))
        self.assertEqual(
            json.loads(self.requests[0].content),
            {"address": "TRTLnope", "allowIntegrated": False},
        )

    async def test_transport_failure(self):
        self.responses[("GET", "/api/service/nodefee")] = httpx.ConnectError(
            "connection refused"
        )
        app = self.make_app()

        with self.assertLogs(level="ERROR"):
            value, error = await app.get_fee()
        self.assertIsNone(value)
        self.assertEqual(error.error_code, ServiceErrorCode.UNKNOWN_ERROR)

    async def test_unstructured_error_body(self):
        self.responses[("GET", "/api/A1/deposits/dep1")] = httpx.Response(
            502, text="Bad Gateway"
        )
        app = self.make_app()

        value, error = await app.get_deposit("dep1")
        self.assertIsNone(value)
        self.assertEqual(error.error_code, ServiceErrorCode.UNKNOWN_ERROR)

    async def test_malformed_success_body(self):
        self.responses[("GET", "/api/A1/accounts/acc1")] = httpx.Response(
            200, json=dict(self.ACCOUNT, balanceUnlocked=-5)
        )
        app = self.make_app()

        value, error = await app.get_account("acc1")
        self.assertIsNone(value)
        self.assertEqual(error.error_code, ServiceErrorCode.UNKNOWN_ERROR)

    async def test_unexpected_success_shapes(self):
        bodies = [
            b"null",
            b'"ok"',
            b"42",
            b"[1, 2]",
            b'{"fee": Infinity, "valid": NaN}',
            b'{"id": "x", "createdAt": -Infinity}',
        ]
        for body in bodies:
            app = TrtlApp(
                ClientConfig("A1", "S1"),
                transport=httpx.MockTransport(
                    lambda request, body=body: httpx.Response(200, content=body)
                ),
            )
            self.addAsyncCleanup(app.close)
            for operation in self.operations(app):
                with self.subTest(body=body):
                    result = await operation
                    self.assertEqual(
                        result, Err(ServiceError(ServiceErrorCode.UNKNOWN_ERROR))
                    )

    async def test_unexpected_nested_shapes(self):
        self.responses[("GET", "/api/A1/accounts")] = httpx.Response(
            200, json={"id": "x"}
        )
        self.responses[("GET", "/api/A1/withdrawals/wd1")] = httpx.Response(
            200, json=dict(self.WITHDRAWAL, fees="none")
        )
        self.responses[("PUT", "/api/A1/accounts/acc1/withdrawaddress")] = (
            httpx.Response(200, json={"withdrawAddress": None})
        )
        app = self.make_app()

        for operation in [
            app.get_accounts(),
            app.get_withdrawal("wd1"),
            app.set_withdraw_address("acc1", "TRTLv32bGBP2cfM3"),
        ]:
            value, error = await operation
            self.assertIsNone(value)
            self.assertEqual(error.error_code, ServiceErrorCode.UNKNOWN_ERROR)

    async def test_initialize_replaces_configuration(self):
        self.responses[("GET", "/v2/A2/deposits/dep1")] = httpx.Response(
            200,
            json={
                "id": "dep1",
                "accountId": "acc1",
                "amount": 5,
                "status": "confirming",
            },
        )
        app = self.make_app()
        app.initialize("A2", "S2", "https://example.com/v2/")

        self.assertEqual(app.app_id, "A2")
        deposit = (await app.get_deposit("dep1")).unwrap()
        self.assertEqual(deposit.amount, 5)
        self.assertEqual(
            str(self.requests[0].url), "https://example.com/v2/A2/deposits/dep1"
        )
        self.assertEqual(self.requests[0].headers["Authorization"], "Bearer S2")

        with self.assertRaises(ValueError):
            app.initialize("", "S3")

    async def test_config_from_env(self):
        config = ClientConfig.from_env(
            {APP_ID_ENV: "A1", APP_SECRET_ENV: "S1", API_BASE_ENV: ""}
        )
        self.assertEqual(config, ClientConfig("A1", "S1"))
        self.assertEqual(ClientConfig.from_env({}).app_id, None)


if __name__ == "__main__":
    unittest.main()
