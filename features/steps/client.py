import asyncio
import typing

import httpx
from behave import given, then, use_step_matcher, when

from trtl_apps.async_client import ClientConfig, TrtlApp

# Use regular expressions
use_step_matcher("re")

NEW_ACCOUNT = {
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

FIXTURES = {"a new account": NEW_ACCOUNT}


def parse_amount(input_value: str) -> typing.Union[int, float]:
    try:
        return int(input_value)
    except ValueError:
        return float(input_value)


def make_client(context: typing.Any, config: ClientConfig) -> TrtlApp:
    context.requests = []
    context.responses = {}

    def handler(request: httpx.Request) -> httpx.Response:
        context.requests.append(request)
        response = context.responses.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"errorCode": "request/invalid-params"})
        return response

    return TrtlApp(config, transport=httpx.MockTransport(handler))


@given(r"an uninitialized client")
def given_uninitialized_client(context: typing.Any):
    context.app = make_client(context, ClientConfig())


@given(r"a client initialized with app id (?P<app_id>\S+) and secret (?P<secret>\S+)")
def given_initialized_client(context: typing.Any, app_id: str, secret: str):
    context.app = make_client(context, ClientConfig(app_id, secret))


@given(r"the service responds to (?P<method>[A-Z]+) (?P<path>\S+) with (?P<fixture>.+)")
def given_response(context: typing.Any, method: str, path: str, fixture: str):
    context.responses[(method, path)] = httpx.Response(200, json=FIXTURES[fixture])


@given(r"the service rejects (?P<method>[A-Z]+) (?P<path>\S+) with (?P<code>\S+)")
def given_rejection(context: typing.Any, method: str, path: str, code: str):
    context.responses[(method, path)] = httpx.Response(400, json={"errorCode": code})


@when(r"I request the node fee")
def when_get_fee(context: typing.Any):
    context.output = asyncio.run(context.app.get_fee())


@when(r"I create an account")
def when_create_account(context: typing.Any):
    context.output = asyncio.run(context.app.create_account())


@when(r"I set the withdraw address of (?P<account_id>\S+) to (?P<address>\S+)")
def when_set_withdraw_address(context: typing.Any, account_id: str, address: str):
    context.output = asyncio.run(
        context.app.set_withdraw_address(account_id, address)
    )


@when(r"I transfer (?P<amount>\S+) from (?P<sender>\S+) to (?P<receiver>\S+)")
def when_transfer(context: typing.Any, amount: str, sender: str, receiver: str):
    context.output = asyncio.run(
        context.app.transfer(sender, receiver, parse_amount(amount))
    )


@when(r"I withdraw with preview (?P<preview_id>\S+)")
def when_withdraw(context: typing.Any, preview_id: str):
    context.output = asyncio.run(context.app.withdraw(preview_id))


@then(r"the result should be error (?P<code>\S+)")
def then_result_error(context: typing.Any, code: str):
    value, error = context.output
    assert value is None, "Expected no value but got " + str(value)
    assert str(error.error_code) == code, (
        "Expected " + code + " but got " + str(error.error_code)
    )


@then(r"the result should be an account with zero balances")
def then_result_new_account(context: typing.Any):
    account, error = context.output
    assert error is None, "Expected no error but got " + str(error)
    assert account.balance_unlocked == 0
    assert account.balance_locked == 0
    assert not account.deleted
    assert account.deposit_address


@then(r"no request should have been sent")
def then_no_request(context: typing.Any):
    assert context.requests == [], "Unexpected requests: " + str(context.requests)


@then(r"(?P<count>\d+) requests? should have been sent")
def then_request_count(context: typing.Any, count: str):
    assert len(context.requests) == int(count), (
        "Expected " + count + " requests but got " + str(len(context.requests))
    )
