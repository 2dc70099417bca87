"""
Resolver module behavioral tests (walk, active chain, dispatch, misses).

Scope
- Validate that resolution records exactly the walked path as the active chain.
- Validate that option tokens stop the walk and are handed over untouched.
- Validate dispatch: single execution of the deepest command, results and
  exceptions passed through.
- Validate resolution misses (unknown vs missing command) and their context.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argtree import command, resolve, dispatch, Option
from argtree.faults import (
    FaultCode,
    UnselectedCommandError,
    UnknownCommandError,
    MissingCommandError,
)


class Recorder:
    """Handler recording every execute() call."""

    def __init__(self, result=None):
        self.calls = []
        self.result = result

    def execute(self, args):
        self.calls.append(args)
        return self.result


class Failing:
    def execute(self, args):
        raise RuntimeError("boom")


class Serve(Recorder):
    port = Option("--port", type=int)


def build():
    """
    tool
    ├── serve           (executable)
    ├── status          (executable)
    └── cluster
        └── node
            ├── list    (executable)
            └── drain   (executable, hidden)
    """
    root = command("tool")
    handlers = {
        "serve": Serve(),
        "status": Recorder("ok"),
        "list": Recorder(["n1", "n2"]),
        "drain": Recorder(),
    }
    root.register("serve", "Run the server.", None, handlers["serve"])
    root.register("status", "Show status.", None, handlers["status"])
    node = root.register("cluster", "Cluster commands.").register("node", "Node commands.")
    node.register("list", "List nodes.", None, handlers["list"])
    node.register("drain", "Drain a node.", None, handlers["drain"], hidden=True)
    return root, handlers


class TestResolve(TestCase):
    """Behavioral tests for resolve()."""

    def setUp(self):
        self.root, self.handlers = build()

    def testEmptyTokensStayAtRoot(self):
        resolution = resolve(self.root, [])
        self.assertEqual(resolution.path, (self.root,))
        self.assertEqual(resolution.remaining, ())
        self.assertEqual(resolution.consumed, 0)
        self.assertIsNone(self.root.active)

    def testNestedWalkBuildsActiveChain(self):
        resolution = resolve(self.root, ["cluster", "node", "list"])
        names = [step.name for step in self.root.chain]
        self.assertEqual(names, ["tool", "cluster", "node", "list"])
        self.assertEqual(resolution.path, self.root.chain)
        self.assertEqual(resolution.consumed, 3)
        self.assertIsNone(resolution.deepest.active)

    def testOptionTokenStopsWalk(self):
        resolution = resolve(self.root, ["serve", "--port", "8080", "cluster"])
        self.assertEqual(resolution.deepest.name, "serve")
        self.assertEqual(resolution.remaining, ("--port", "8080", "cluster"))
        self.assertIsNone(resolution.candidate)

    def testUnknownWordStopsWalk(self):
        resolution = resolve(self.root, ["cluster", "nod", "list"])
        self.assertEqual(resolution.deepest.name, "cluster")
        self.assertEqual(resolution.remaining, ("nod", "list"))
        self.assertEqual(resolution.candidate, "nod")
        self.assertIsNone(resolution.deepest.active)

    def testSecondPassOverwritesFirst(self):
        resolve(self.root, ["cluster", "node", "list"])
        resolve(self.root, ["status"])
        self.assertEqual([step.name for step in self.root.chain], ["tool", "status"])
        cluster = self.root.find("cluster")
        self.assertIsNone(cluster.active)
        self.assertIsNone(cluster.find("node").active)

    def testHiddenCommandsStillResolve(self):
        resolution = resolve(self.root, ["cluster", "node", "drain"])
        self.assertEqual(resolution.deepest.name, "drain")

    def testResolveFromInnerNode(self):
        cluster = self.root.find("cluster")
        resolution = resolve(cluster, ["node", "list", "-a"])
        self.assertEqual([step.name for step in resolution.path], ["cluster", "node", "list"])
        self.assertEqual(resolution.remaining, ("-a",))

    def testTokensAreNeverMutated(self):
        tokens = ["serve", "--port", "1"]
        resolve(self.root, tokens)
        self.assertEqual(tokens, ["serve", "--port", "1"])

    def testAcceptsAnyIterableOfStrings(self):
        resolution = resolve(self.root, iter(("cluster", "node")))
        self.assertEqual(resolution.deepest.name, "node")

    def testRejectsPlainString(self):
        with self.assertRaises(TypeError):
            resolve(self.root, "serve")

    def testRejectsNonStringTokens(self):
        with self.assertRaises(TypeError):
            resolve(self.root, ["serve", 8080])


class TestDispatch(TestCase):
    """Behavioral tests for dispatch() and Resolution.execute()."""

    def setUp(self):
        self.root, self.handlers = build()

    def testLeafReceivesRemainingTokens(self):
        dispatch(self.root, ["serve", "--port", "8080"])
        self.assertEqual(self.handlers["serve"].calls, [["--port", "8080"]])
        self.assertIs(self.root.active, self.root.find("serve"))

    def testNestedLeafWithNoArguments(self):
        result = dispatch(self.root, ["cluster", "node", "list"])
        self.assertEqual(result, ["n1", "n2"])
        self.assertEqual(self.handlers["list"].calls, [[]])

    def testOnlyDeepestExecutes(self):
        root = command("tool", None, None, Recorder("root"))
        child = Recorder("child")
        root.register("child", None, None, child)
        self.assertEqual(dispatch(root, ["child"]), "child")
        self.assertEqual(root.handler.calls, [])
        self.assertEqual(child.calls, [[]])

    def testExecutableRootRunsWithoutCommand(self):
        root = command("tool", None, None, Recorder("root"))
        root.register("child", None, None, Recorder())
        self.assertEqual(dispatch(root, ["positional", "-x"]), "root")
        self.assertEqual(root.handler.calls, [["positional", "-x"]])

    def testHandlerExceptionPropagatesUnchanged(self):
        root = command("tool")
        root.register("fail", None, None, Failing())
        with self.assertRaises(RuntimeError) as context:
            dispatch(root, ["fail"])
        self.assertNotIsInstance(context.exception, UnselectedCommandError)

    def testArgumentsAreAFreshList(self):
        dispatch(self.root, ["serve", "-v"])
        self.assertIsInstance(self.handlers["serve"].calls[0], list)


class TestResolutionMiss(TestCase):
    """Behavioral tests for resolution misses."""

    def setUp(self):
        self.root, self.handlers = build()

    def testUnknownTopLevelCommand(self):
        with self.assertRaises(UnknownCommandError) as context:
            dispatch(self.root, ["bogus"])
        fault = context.exception
        self.assertEqual(fault.code, FaultCode.UNKNOWN_COMMAND)
        self.assertIs(fault.command, self.root)
        self.assertEqual(fault.options["candidate"], "bogus")
        self.assertIsNone(self.root.active)
        for handler in self.handlers.values():
            self.assertEqual(handler.calls, [])

    def testUnknownSubcommandSuggestsCloseMatch(self):
        with self.assertRaises(UnknownCommandError) as context:
            dispatch(self.root, ["cluster", "nod"])
        fault = context.exception
        self.assertEqual(fault.code, FaultCode.UNKNOWN_SUBCOMMAND)
        self.assertEqual(fault.suggestions, ("node",))
        self.assertIn("node", fault.hint)

    def testSuggestionsSkipHiddenCommands(self):
        with self.assertRaises(UnknownCommandError) as context:
            dispatch(self.root, ["cluster", "node", "drian"])
        self.assertNotIn("drain", context.exception.suggestions)

    def testMissingTopLevelCommand(self):
        with self.assertRaises(MissingCommandError) as context:
            dispatch(self.root, [])
        self.assertEqual(context.exception.code, FaultCode.MISSING_COMMAND)

    def testMissingSubcommandBeforeOption(self):
        with self.assertRaises(MissingCommandError) as context:
            dispatch(self.root, ["cluster", "--all"])
        fault = context.exception
        self.assertEqual(fault.code, FaultCode.MISSING_SUBCOMMAND)
        self.assertEqual(fault.command.name, "cluster")

    def testMissesShareBaseClass(self):
        for tokens in ([], ["bogus"]):
            with self.assertRaises(UnselectedCommandError):
                dispatch(self.root, tokens)

    def testFaultMessageNamesTheToken(self):
        with self.assertRaises(UnknownCommandError) as context:
            dispatch(self.root, ["bogus"])
        self.assertIn("'bogus'", str(context.exception))

    def testResolutionFaultWithoutExecuting(self):
        resolution = resolve(self.root, ["cluster"])
        self.assertFalse(resolution.executable)
        self.assertIsInstance(resolution.fault(), MissingCommandError)


class TestConcurrentPasses(TestCase):
    """Clones resolve independently of the original tree."""

    def testCloneResolutionDoesNotTouchOriginal(self):
        root, _ = build()
        resolve(root, ["status"])
        clone = root.clone()
        resolve(clone, ["cluster", "node", "list"])
        self.assertEqual([step.name for step in root.chain], ["tool", "status"])
        self.assertEqual([step.name for step in clone.chain], ["tool", "cluster", "node", "list"])


if __name__ == "__main__":
    unittest.main()
