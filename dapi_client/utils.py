from __future__ import annotations

import asyncio
import functools
import re
import threading
from typing import Any, Callable

_SCHEME_RE = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.\-]*:)?//(?!/)")


def strip_hostname(hostname: str) -> str:
    """Drop a leading ``scheme://`` (or bare ``//``): ``https://host:443`` -> ``host:443``.

    grpc resolver targets such as ``dns:///host:443`` are left untouched.
    """
    return _SCHEME_RE.sub("", hostname, count=1)


def _settle(future: asyncio.Future, error: BaseException | None, result: Any) -> None:
    if future.done():
        # cancelled by the awaiting side
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


def promisify(fn: Callable[..., Any]) -> Callable[..., asyncio.Future]:
    """Turn a callback-last function into one returning an ``asyncio.Future``.

    ``fn`` is called as ``fn(*args, callback)`` where ``callback(error, result)``
    may fire from any thread. Only the first invocation of the callback counts.
    Must be called while an event loop is running.
    """

    @functools.wraps(fn)
    def wrapper(*args: Any) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        lock = threading.Lock()
        fired = False

        def callback(error: BaseException | None, result: Any = None) -> None:
            nonlocal fired
            with lock:
                if fired:
                    return
                fired = True
            if loop.is_closed():
                return
            loop.call_soon_threadsafe(_settle, future, error, result)

        fn(*args, callback)
        return future

    return wrapper
