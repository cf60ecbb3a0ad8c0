import json
import typing

from behave import given, then, use_step_matcher

# Use regular expressions
use_step_matcher("re")


@given(r"error code (?P<code>\S+)")
def given_error_code(context: typing.Any, code: str):
    context.input = code


@given(r"the error body (?P<body>.+)")
def given_error_body(context: typing.Any, body: str):
    context.input = json.loads(body)


@then(r"the error code should be (?P<code>\S+)")
def then_error_code(context: typing.Any, code: str):
    assert str(context.output.error_code) == code, (
        "Expected " + code + " but got " + str(context.output.error_code)
    )


@then(r'the error message should be "(?P<message>.*)"')
def then_error_message(context: typing.Any, message: str):
    assert context.output.message == message, (
        "Expected " + message + " but got " + context.output.message
    )
