import asyncio
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Fired[R]:
    """The call triggered execution."""

    value: R
    """What the underlying function returned."""


@dataclass(frozen=True, slots=True)
class Failed:
    """The call triggered execution, but the underlying function raised."""

    error: BaseException
    """The exception raised by the underlying function, or `CancelledError` if its awaitable was cancelled."""


@dataclass(frozen=True, slots=True)
class Superseded:
    """The call never triggered execution: it was replaced by a later call, suppressed, or cancelled."""


SUPERSEDED = Superseded()

type Outcome[R] = Fired[R] | Failed | Superseded


def settle(future: asyncio.Future[Any], outcome: Outcome[Any]) -> None:
    """
    Deliver an outcome to a plain result future.

    - `Fired` resolves the future with the value
    - `Failed` rejects it with the error, or cancels it if the error is a `CancelledError`
    - `Superseded` leaves it pending forever

    Futures that are already done (e.g. cancelled by the awaiting caller) are left alone.
    """
    if future.done():
        return
    if isinstance(outcome, Fired):
        future.set_result(outcome.value)
    elif isinstance(outcome, Failed):
        if isinstance(outcome.error, asyncio.CancelledError):
            future.cancel()
        else:
            future.set_exception(outcome.error)
