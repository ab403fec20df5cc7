"""
Invocation context and middleware chain executor.

The chain for a matched command is every middleware on the path from the root
down to the command (root first, registration order inside a node), followed
by the handler. Each stage receives (context, next); awaiting next() runs the
rest of the chain, so code after the await observes the inner stages as done:

    async def timing(context, next):
        started = time.monotonic()
        await next()
        context.ui.box(f"took {time.monotonic() - started:.2f}s")

A stage that never calls next() ends the chain there. A stage that calls next()
without awaiting it still runs the rest of the chain, after the stage returns.
Calling next() a second time from the same stage raises MiddlewareError.
"""
import asyncio
import inspect
import logging as logmod

from .faults import MiddlewareError
from .utils import mirror, rename

logging = logmod.getLogger(__name__)


class Context:
    """
    Values handed to middleware and handler.

    - args: positional name -> raw string.
    - options: option key (flag without "--") -> parsed value.
    - path: command names from the root to the matched command.
    - ui: the UI capability, or None for plain-text output.
    """
    __slots__ = ("args", "options", "path", "ui")

    def __init__(self, args, options, path, ui=None):
        self.args = args
        self.options = options
        self.path = tuple(path)
        self.ui = ui

    def __repr__(self):
        return f"Context(args={self.args!r}, options={self.options!r}, path={self.path!r})"


def stages(command, /):
    """
    Collect the middleware from the root down to the given command.
    """
    return tuple(middleware for node in command.path for middleware in node.middlewares)


class Continuation:
    """
    Awaitable returned by next(); the rest of the chain is already scheduled.
    """
    __slots__ = ("_task", "awaited")

    def __init__(self, coroutine, /):
        self._task = asyncio.ensure_future(coroutine)
        self.awaited = False

    def __await__(self):
        self.awaited = True
        return self._task.__await__()

    def cancel(self):
        return self._task.cancel()


class Chain:
    """
    Single-use executor over stages(command) followed by the handler.

    A forward-only cursor records the furthest stage reached; next() checks
    and advances it before scheduling anything, so a repeated call raises
    MiddlewareError at the call site. A continuation the stage never awaited
    is awaited once the stage returns.
    """
    stages = mirror("stages")

    def __init__(self, command, context, /):
        self._stages = stages(command)
        self._handler = command.handler
        self._context = context
        self._cursor = -1

    async def __call__(self):
        if self._cursor >= 0:
            raise MiddlewareError("chain already executed")
        self._cursor = 0
        await self._step(0)

    async def _step(self, index, /):
        if index == len(self._stages):
            logging.debug("running handler %r", self._handler)
            result = self._handler(self._context) if self._handler is not None else None
            if inspect.isawaitable(result):
                await result
            return

        middleware = self._stages[index]
        logging.debug("running middleware %d/%d %r", index + 1, len(self._stages), middleware)
        continuations = []

        @rename("next")
        def next():
            if index + 1 <= self._cursor:
                raise MiddlewareError("next() called multiple times")
            self._cursor = index + 1
            continuations.append(continuation := Continuation(self._step(index + 1)))
            return continuation

        try:
            result = middleware(self._context, next)
            if inspect.isawaitable(result):
                await result
        except BaseException:
            for continuation in continuations:
                if not continuation.awaited:
                    continuation.cancel()
            raise

        for continuation in continuations:
            if not continuation.awaited:
                await continuation


async def execute(command, context, /):
    """
    Run the middleware chain of a command around its handler.
    """
    await Chain(command, context)()


__all__ = (
    "Context",
    "Continuation",
    "Chain",
    "stages",
    "execute",
)
