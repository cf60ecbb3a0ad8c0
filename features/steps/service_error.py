import typing

from behave import use_step_matcher, when

from trtl_apps.service_error import ServiceError

# Use regular expressions
use_step_matcher("re")


@when(r"I create a service error")
def when_create_service_error(context: typing.Any):
    context.output = ServiceError(context.input)


@when(r'I create a service error with message "(?P<message>.*)"')
def when_create_service_error_with_message(context: typing.Any, message: str):
    context.output = ServiceError(context.input, message)


@when(r"I parse the error body")
def when_parse_error_body(context: typing.Any):
    context.output = ServiceError.from_dict(context.input)
