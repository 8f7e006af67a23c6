import asyncio
import logging
from dataclasses import dataclass
from functools import partial, update_wrapper
from inspect import isawaitable
from typing import Annotated, Any, Callable, Coroutine, Literal, overload

from annotated_types import Ge
from pydantic import AllowInfNan, ConfigDict, validate_call

from debounce.outcome import SUPERSEDED, Failed, Fired, Outcome, settle

log = logging.getLogger(__name__)

type State = Literal['idle', 'pending', 'firing']

_UNBOUND = object()


@dataclass(slots=True)
class _Request:
    """A single call to the wrapper, waiting to learn whether it will execute."""

    loop: asyncio.AbstractEventLoop
    context: Any
    """The instance the wrapper was accessed through, or `_UNBOUND`."""
    args: tuple
    kwargs: dict
    deliver: Callable[[Outcome[Any]], None]
    """Settles the caller's handle."""


class Debounced[**P, R]:
    """
    Wraps a function so that bursts of calls collapse into a single invocation.

    - Trailing mode (default): each call restarts the timer; once `wait` seconds pass without a
      call, the function runs with the latest call's arguments.
    - Immediate mode: the first call after a quiet period runs straight away, and then calls are
      suppressed until `wait` seconds pass without a call. Every suppressed call restarts the
      window.

    Calling the wrapper returns an `asyncio.Future` that resolves with the function's return value
    (awaited, if the function is async), or is rejected with the exception it raised. The future
    of a call that never executes (superseded by a later call, suppressed, or cancelled) stays
    pending forever, so apply a timeout if you await it. Use `outcome` instead to get a future that
    always settles.

    When used as a method decorator, the instance the wrapper is accessed through is passed to the
    function as `self` at call time. All instances share the one timer, since it belongs to the
    wrapper rather than to the instance.
    """

    @validate_call(config=ConfigDict(arbitrary_types_allowed=True))
    def __init__(
        self,
        fn: Callable[..., Any],
        wait: Annotated[float, Ge(0), AllowInfNan(False)],
        immediate: bool = False,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.wait = wait
        self.immediate = immediate
        self._fn = fn
        self._loop = loop
        self._timer: asyncio.TimerHandle | None = None
        self._request: _Request | None = None
        self._firing = False
        update_wrapper(self, fn, updated=())

    @property
    def state(self) -> State:
        if self._firing:
            return 'firing'
        return 'pending' if self._timer is not None else 'idle'

    @property
    def pending(self) -> bool:
        """Whether a timer is outstanding."""
        return self._timer is not None

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> asyncio.Future[R]:
        return self._submit(_UNBOUND, args, kwargs, as_outcome=False)

    def outcome(self, *args: P.args, **kwargs: P.kwargs) -> asyncio.Future[Outcome[R]]:
        """Like calling the wrapper, but the future always settles with a `Fired`, `Failed` or `Superseded`."""
        return self._submit(_UNBOUND, args, kwargs, as_outcome=True)

    def cancel(self) -> None:
        """
        Clear the pending timer, if any.

        A trailing call that was waiting to execute is dropped; its plain handle never settles,
        and its outcome handle settles with `Superseded`. Safe to call at any time.
        """
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            log.debug(f'{self!r}: cancelled')
        request, self._request = self._request, None
        if request is not None:
            request.deliver(SUPERSEDED)

    def __get__(self, instance: Any, owner: type | None = None):
        if instance is None:
            return self
        return BoundDebounced(self, instance)

    def __repr__(self):
        mode = 'immediate' if self.immediate else 'trailing'
        name = getattr(self._fn, '__qualname__', repr(self._fn))
        return f'{type(self).__name__}({name}, wait={self.wait}, {mode})'

    def _submit(self, context: Any, args: tuple, kwargs: dict, *, as_outcome: bool) -> asyncio.Future:
        loop = self._loop or asyncio.get_running_loop()
        future = loop.create_future()

        if as_outcome:

            def deliver(outcome: Outcome[Any]) -> None:
                if not future.done():
                    future.set_result(outcome)

        else:
            deliver = partial(settle, future)

        request = _Request(loop, context, args, kwargs, deliver)
        if self.immediate:
            self._call_leading(request)
        else:
            self._call_trailing(request)
        return future

    def _call_leading(self, request: _Request) -> None:
        call_now = self._timer is None
        # The window opens before the function runs, so it stays shut even if the function fails.
        self._arm(request.loop, self._on_quiet)
        if call_now:
            self._fire(request)
        else:
            log.debug(f'{self!r}: suppressed, window extended by {self.wait}s')
            request.deliver(SUPERSEDED)

    def _call_trailing(self, request: _Request) -> None:
        superseded, self._request = self._request, request
        if superseded is not None:
            log.debug(f'{self!r}: superseded by a newer call')
            superseded.deliver(SUPERSEDED)
        self._arm(request.loop, self._on_timer)

    def _arm(self, loop: asyncio.AbstractEventLoop, callback: Callable[[], None]) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self.wait, callback)

    def _on_quiet(self) -> None:
        self._timer = None
        log.debug(f'{self!r}: quiet period over')

    def _on_timer(self) -> None:
        self._timer = None
        request, self._request = self._request, None
        if request is not None:
            self._fire(request)

    def _fire(self, request: _Request) -> None:
        args = request.args if request.context is _UNBOUND else (request.context, *request.args)
        log.debug(f'{self!r}: firing')
        self._firing = True
        try:
            ret = self._fn(*args, **request.kwargs)
        except (Exception, asyncio.CancelledError) as e:
            log.debug(f'{self!r}: raised {e!r}')
            request.deliver(Failed(e))
            return
        finally:
            self._firing = False

        if isawaitable(ret):
            task = asyncio.ensure_future(ret, loop=request.loop)
            task.add_done_callback(lambda t: request.deliver(_outcome_of(t)))
        else:
            request.deliver(Fired(ret))


class BoundDebounced[**P, R]:
    """A `Debounced` accessed through an instance; the instance is passed as the first argument."""

    __slots__ = ('__func__', '__self__')

    def __init__(self, debounced: Debounced, instance: Any):
        self.__func__ = debounced
        self.__self__ = instance

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> asyncio.Future[R]:
        return self.__func__._submit(self.__self__, args, kwargs, as_outcome=False)

    def outcome(self, *args: P.args, **kwargs: P.kwargs) -> asyncio.Future[Outcome[R]]:
        return self.__func__._submit(self.__self__, args, kwargs, as_outcome=True)

    def cancel(self) -> None:
        self.__func__.cancel()

    def __getattr__(self, name: str):
        if name in self.__slots__:
            # Not yet initialised, e.g. during copy
            raise AttributeError(name)
        return getattr(self.__func__, name)

    def __repr__(self):
        return f'<bound {self.__func__!r} of {self.__self__!r}>'


def _outcome_of(task: asyncio.Future) -> Outcome[Any]:
    try:
        return Fired(task.result())
    except (Exception, asyncio.CancelledError) as e:
        return Failed(e)


@overload
def debounce[**P, R](
    fn: Callable[P, Coroutine[Any, Any, R]],
    wait: float,
    immediate: bool = False,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> Debounced[P, R]: ...


@overload
def debounce[**P, R](
    fn: Callable[P, R],
    wait: float,
    immediate: bool = False,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> Debounced[P, R]: ...


@overload
def debounce[**P, R](
    *,
    wait: float,
    immediate: bool = False,
    loop: asyncio.AbstractEventLoop | None = None,
) -> Callable[[Callable[P, R]], Debounced[P, R]]: ...


def debounce(
    fn: Callable[..., Any] | None = None,
    wait: float | None = None,
    immediate: bool = False,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> Debounced | Callable[[Callable[..., Any]], Debounced]:
    """
    Create a debounced wrapper around `fn`, or a decorator that does so.

    Args:
        fn: The function to wrap. Omit it to use `debounce(wait=...)` as a decorator.
        wait: Length of the quiet period, in seconds.
        immediate: Run on the leading edge of a burst instead of the trailing edge.
        loop: Event loop to schedule on. Defaults to the loop that is running at call time.

    Raises:
        pydantic.ValidationError: (a `ValueError`) if `wait` is missing or negative, or `fn` isn't callable.
    """

    def decorator(fn: Callable[..., Any]) -> Debounced:
        return Debounced(fn, wait, immediate, loop=loop)  # type: ignore

    if fn is None:
        return decorator
    else:
        return decorator(fn)
