"""
Argtree resolver: walk tokens down a command tree and run what they select.

Protocol
1. resolve(node, tokens) clears the resolution state of node's subtree.
2. While the next token is a bare word (does not start with '-') and names a
   child of the current node, that child becomes the current node's active
   child and the token is consumed.
3. The walk stops at the first token that is not a bare word, at a bare word
   naming no child, or when tokens run out. The node it stops at is the deepest
   resolved node.
4. dispatch(node, tokens) resolves, then hands the unconsumed tokens to the
   deepest node's execute() and returns whatever it returns.

Option tokens are never consumed here; interpreting them is up to the handler
(or the parser in front of it). Ancestors never execute, even when their
handlers could.

Nothing here is thread-safe: a pass mutates the tree. Serialize passes over
one tree, or resolve against Command.clone() copies.
"""
import difflib
import logging
from collections.abc import Iterable
from typing import NamedTuple

from .capabilities import executable
from .faults import *

logger = logging.getLogger(__name__)


def _bare(token):
    return not token.startswith("-")


def _route(node):
    return " ".join(step.name for step in node.path)


class Resolution(NamedTuple):
    """
    Outcome of one resolution pass.

    Fields
    - path: nodes from the starting node to the deepest resolved node.
    - remaining: tokens left unconsumed, in order.
    - consumed: number of tokens matched to command names.
    """
    path: tuple
    remaining: tuple[str, ...]
    consumed: int

    @property
    def deepest(self):
        return self.path[-1]

    @property
    def candidate(self):
        """
        The bare word the walk stopped on, or None when it stopped for another reason.
        """
        if self.remaining and _bare(self.remaining[0]):
            return self.remaining[0]
        return None

    @property
    def executable(self):
        return executable(self.deepest.handler)

    def fault(self):
        """
        Build the resolution-miss exception describing why nothing can run.
        """
        deepest = self.deepest
        nested = deepest.parent is not None
        kind = "subcommand" if nested else "command"
        route = _route(deepest)

        if (candidate := self.candidate) is not None:
            code = FaultCode.UNKNOWN_SUBCOMMAND if nested else FaultCode.UNKNOWN_COMMAND
            suggestions = difflib.get_close_matches(
                candidate, [child.name for child in deepest.children if not child.hidden], 5
            )
            try:
                hint = "did you mean %r? you can also run '%s --help' to see all %ss" % (suggestions[0], route, kind)
            except IndexError:
                hint = "run '%s --help' to see all %ss" % (route, kind)
            return UnknownCommandError(
                "unknown %s %r" % (kind, candidate),
                title="unknown %s" % kind,
                code=code,
                command=deepest,
                candidate=candidate,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(code),
            )

        code = FaultCode.MISSING_SUBCOMMAND if nested else FaultCode.MISSING_COMMAND
        return MissingCommandError(
            "no %s given" % kind,
            title="missing %s" % kind,
            code=code,
            command=deepest,
            hint="add one of the %ss listed by '%s --help'" % (kind, route),
            docs=getdoc(code),
        )

    def execute(self):
        """
        Run the deepest node's handler with the remaining tokens.

        Raises
        - UnselectedCommandError (UnknownCommandError or MissingCommandError)
          when the deepest node cannot execute.
        - whatever the handler raises, unchanged.
        """
        if not self.executable:
            raise self.fault()
        logger.debug("dispatching %r with %d remaining token(s)", _route(self.deepest), len(self.remaining))
        return self.deepest.handler.execute(list(self.remaining))


def resolve(node, tokens, /):
    """
    Resolve tokens against the subtree rooted at node.

    Parameters
    - node: Command the walk starts from (usually the root).
    - tokens: iterable of strings, typically sys.argv[1:].

    Returns
    - Resolution; afterwards node.chain is exactly Resolution.path.

    Raises
    - TypeError when tokens is a plain string or yields non-strings.
    """
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("resolve() tokens must be an iterable of strings")
    tokens = tuple(tokens)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("resolve() tokens must be an iterable of strings")

    node.reset()
    path = [current := node]
    index = 0

    while index < len(tokens) and _bare(candidate := tokens[index]):
        if (child := current.find(candidate)) is None:
            logger.debug("no command %r under %r", candidate, _route(current))
            break
        current.activate(child)
        path.append(current := child)
        index += 1

    logger.debug("resolved %r after %d token(s)", _route(current), index)
    return Resolution(tuple(path), tokens[index:], index)


def dispatch(node, tokens, /):
    """
    Resolve tokens and execute the deepest resolved node.

    The handler's return value is returned as-is and its exceptions propagate
    as-is; a node without the execution capability raises an
    UnselectedCommandError instead.
    """
    return resolve(node, tokens).execute()


__all__ = (
    "Resolution",
    "resolve",
    "dispatch",
)
