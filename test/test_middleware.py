"""
Middleware chain tests (ordering, inheritance, truncation, misuse).

Conventions
- Test method names follow CamelCase per project convention.
- Async behavior is exercised through IsolatedAsyncioTestCase.
"""

import asyncio
import unittest
from unittest import IsolatedAsyncioTestCase

from argus import Context, MiddlewareError, cli
from argus.middleware import Chain, execute, stages


class TestChain(IsolatedAsyncioTestCase):
    def setUp(self):
        self.events = []

    def stage(self, name):
        async def middleware(context, next):
            self.events.append(f"{name}-pre")
            await next()
            self.events.append(f"{name}-post")
        return middleware

    def handler(self, context):
        self.events.append("handler")

    async def testOnionOrdering(self):
        program = cli("app").use(self.stage("A")).use(self.stage("B")).action(self.handler)
        command = program.compile()
        await execute(command, Context({}, {}, command.route))
        self.assertEqual(self.events, ["A-pre", "B-pre", "handler", "B-post", "A-post"])

    async def testRootToLeafInheritance(self):
        program = cli("app").use(self.stage("root"))
        child = program.command("build").use(self.stage("build")).action(self.handler)
        command = child.compile()
        self.assertEqual(len(stages(command)), 2)
        await execute(command, Context({}, {}, command.route))
        self.assertEqual(self.events, ["root-pre", "build-pre", "handler", "build-post", "root-post"])

    async def testSiblingMiddlewareIsNotInherited(self):
        program = cli("app")
        program.command("other").use(self.stage("other"))
        command = program.command("build").action(self.handler).compile()
        await execute(command, Context({}, {}, command.route))
        self.assertEqual(self.events, ["handler"])

    async def testStageWithoutNextTruncates(self):
        async def gate(context, next):
            self.events.append("gate")

        command = cli("app").use(gate).use(self.stage("B")).action(self.handler).compile()
        await execute(command, Context({}, {}, command.route))
        self.assertEqual(self.events, ["gate"])

    async def testDoubleNextRaises(self):
        async def twice(context, next):
            await next()
            await next()

        command = cli("app").use(twice).action(self.handler).compile()
        with self.assertRaises(MiddlewareError):
            await execute(command, Context({}, {}, command.route))
        self.assertEqual(self.events, ["handler"])

    async def testSynchronousDoubleNextRaises(self):
        def twice(context, next):
            next()
            return next()

        command = cli("app").use(twice).action(self.handler).compile()
        with self.assertRaises(MiddlewareError):
            await execute(command, Context({}, {}, command.route))
        await asyncio.sleep(0)
        self.assertEqual(self.events, [])

    async def testUnawaitedNextStillRunsHandler(self):
        def wrap(context, next):
            self.events.append("pre")
            next()
            self.events.append("post")

        command = cli("app").use(wrap).action(self.handler).compile()
        await execute(command, Context({}, {}, command.route))
        self.assertEqual(self.events, ["pre", "post", "handler"])

    async def testUnawaitedNextPropagatesHandlerErrors(self):
        def wrap(context, next):
            next()

        def handler(context):
            raise LookupError("boom")

        command = cli("app").use(wrap).action(handler).compile()
        with self.assertRaises(LookupError):
            await execute(command, Context({}, {}, command.route))

    async def testChainRunsOnce(self):
        command = cli("app").action(self.handler).compile()
        chain = Chain(command, Context({}, {}, command.route))
        await chain()
        with self.assertRaises(MiddlewareError):
            await chain()
        self.assertEqual(self.events, ["handler"])

    async def testMiddlewareErrorIsRuntimeError(self):
        self.assertTrue(issubclass(MiddlewareError, RuntimeError))

    async def testSynchronousStagesAndHandlers(self):
        def passthrough(context, next):
            self.events.append("sync")
            return next()

        command = cli("app").use(passthrough).action(self.handler).compile()
        await execute(command, Context({}, {}, command.route))
        self.assertEqual(self.events, ["sync", "handler"])

    async def testAsyncHandlerIsAwaited(self):
        async def handler(context):
            await asyncio.sleep(0)
            self.events.append("async-handler")

        command = cli("app").use(self.stage("A")).action(handler).compile()
        await execute(command, Context({}, {}, command.route))
        self.assertEqual(self.events, ["A-pre", "async-handler", "A-post"])

    async def testStageExceptionPropagates(self):
        async def broken(context, next):
            raise LookupError("boom")

        command = cli("app").use(broken).action(self.handler).compile()
        with self.assertRaises(LookupError):
            await execute(command, Context({}, {}, command.route))
        self.assertEqual(self.events, [])

    async def testContextIsShared(self):
        async def enrich(context, next):
            context.options["seen"] = True
            await next()

        def handler(context):
            self.events.append(context.options["seen"])

        command = cli("app").use(enrich).action(handler).compile()
        await execute(command, Context({}, {}, command.route))
        self.assertEqual(self.events, [True])

    async def testChainExposesStages(self):
        first = self.stage("A")
        command = cli("app").use(first).action(self.handler).compile()
        self.assertEqual(Chain(command, Context({}, {}, command.route)).stages, (first,))


if __name__ == "__main__":
    unittest.main()
