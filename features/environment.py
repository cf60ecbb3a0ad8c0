import asyncio
import typing


def after_scenario(context: typing.Any, scenario: typing.Any):
    app = getattr(context, "app", None)
    if app is not None:
        asyncio.run(app.close())
