"""
Recognizers for tainted sources, dangerous sinks and sanitizing transforms.

Sources and transforms are matched textually against the bounded source
slice of identifier, member and call nodes. Sinks are matched structurally
on the identity of the call target, which keeps false positives down.
New entries can be registered on a ``PatternCatalog`` without touching the
flow extractor.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Pattern, Tuple

from .parser import NodeKind, SyntaxNode

# Sink kinds
CODE_EXEC = "code-exec"
PROCESS_EXEC = "process-exec"
RAW_MARKUP_INJECTION = "raw-markup-injection"
DATABASE_QUERY = "database-query"
OPEN_REDIRECT = "open-redirect"

TEXTUAL_KINDS = frozenset({NodeKind.IDENTIFIER, NodeKind.MEMBER, NodeKind.CALL})


@dataclass(frozen=True)
class TextPattern:
    """A source or transform recognizer over a node's text."""
    name: str
    regex: Pattern[str]

    def matches(self, node: SyntaxNode) -> bool:
        return node.kind in TEXTUAL_KINDS and self.regex.search(node.text) is not None


@dataclass(frozen=True)
class SinkPattern:
    """A structural sink recognizer."""
    kind: str
    match: Callable[[SyntaxNode], bool]


def callee_name(node: SyntaxNode) -> Optional[str]:
    """Name of a call's target when it is a bare identifier: ``eval(x)``."""
    if node.kind is not NodeKind.CALL or node.callee is None:
        return None
    if node.callee.kind is NodeKind.IDENTIFIER:
        return node.callee.name
    return None


def member_call(node: SyntaxNode) -> Optional[Tuple[str, str]]:
    """
    ``(object, method)`` for calls shaped like ``obj.method(...)``.

    Both sides must be plain identifiers; ``this.db.query()`` or
    ``getDb().query()`` do not qualify.
    """
    if node.kind is not NodeKind.CALL or node.callee is None:
        return None
    target = node.callee
    if target.kind is not NodeKind.MEMBER or target.obj is None or target.prop is None:
        return None
    if target.obj.kind is not NodeKind.IDENTIFIER or target.prop.kind is not NodeKind.IDENTIFIER:
        return None
    return target.obj.name, target.prop.name


def _calls(*names: str) -> Callable[[SyntaxNode], bool]:
    wanted = frozenset(names)
    return lambda node: callee_name(node) in wanted


def _calls_method(obj: str, methods: Optional[Iterable[str]] = None) -> Callable[[SyntaxNode], bool]:
    wanted = frozenset(methods) if methods is not None else None

    def match(node: SyntaxNode) -> bool:
        pair = member_call(node)
        if pair is None or pair[0] != obj:
            return False
        return wanted is None or pair[1] in wanted

    return match


_DB_METHOD = re.compile(r"query|execute", re.IGNORECASE)


def _is_database_call(node: SyntaxNode) -> bool:
    pair = member_call(node)
    if pair is None:
        return False
    method = pair[1]
    # DOM lookups, not database access
    if method.startswith("querySelector"):
        return False
    return _DB_METHOD.search(method) is not None


def _is_raw_markup_attribute(node: SyntaxNode) -> bool:
    return node.kind is NodeKind.MARKUP_ATTRIBUTE and node.name == "dangerouslySetInnerHTML"


DEFAULT_SOURCES = (
    TextPattern("request input", re.compile(r"req\.(body|query|params)\b")),
    TextPattern("environment variable", re.compile(r"process\.env\.[A-Z0-9_]+")),
    TextPattern("browser location", re.compile(r"window\.location")),
    TextPattern("local storage read", re.compile(r"localStorage\.getItem")),
    TextPattern("document input", re.compile(r"document\.(location|cookie|URL|referrer)\b")),
    TextPattern("session storage read", re.compile(r"sessionStorage\.getItem")),
    TextPattern("location fragment", re.compile(r"\blocation\.(search|hash)\b")),
)

DEFAULT_SINKS = (
    SinkPattern(CODE_EXEC, _calls("eval")),
    SinkPattern(CODE_EXEC, _calls_method("vm", {"runInNewContext", "runInThisContext", "runInContext"})),
    SinkPattern(PROCESS_EXEC, _calls_method("child_process")),
    SinkPattern(PROCESS_EXEC, _calls("exec", "execSync", "spawn")),
    SinkPattern(RAW_MARKUP_INJECTION, _is_raw_markup_attribute),
    SinkPattern(RAW_MARKUP_INJECTION, _calls_method("document", {"write", "writeln"})),
    SinkPattern(DATABASE_QUERY, _is_database_call),
    SinkPattern(OPEN_REDIRECT, _calls_method("res", {"redirect"})),
)

DEFAULT_TRANSFORMS = (
    TextPattern("sanitizer", re.compile(r"sanitize", re.IGNORECASE)),
    TextPattern("uri encoding", re.compile(r"encodeURI")),
    TextPattern("uri component encoding", re.compile(r"encodeURIComponent")),
    TextPattern("schema validation", re.compile(r"\b(?:zod|z|\w*Schema)\.(?:parse|safeParse)\b")),
    TextPattern("escaping", re.compile(r"\bescape\w*\s*\(")),
)


class PatternCatalog:
    """
    Registry of the three recognizer families.

    A catalog is read-only during analysis and can be shared once it has
    been configured.
    """

    def __init__(self,
                 sources: Optional[Iterable[TextPattern]] = None,
                 sinks: Optional[Iterable[SinkPattern]] = None,
                 transforms: Optional[Iterable[TextPattern]] = None):
        self.sources: List[TextPattern] = list(DEFAULT_SOURCES if sources is None else sources)
        self.sinks: List[SinkPattern] = list(DEFAULT_SINKS if sinks is None else sinks)
        self.transforms: List[TextPattern] = list(DEFAULT_TRANSFORMS if transforms is None else transforms)

    def add_source(self, name: str, pattern: str, flags: int = 0) -> None:
        self.sources.append(TextPattern(name, re.compile(pattern, flags)))

    def add_sink(self, kind: str, match: Callable[[SyntaxNode], bool]) -> None:
        self.sinks.append(SinkPattern(kind, match))

    def add_transform(self, name: str, pattern: str, flags: int = 0) -> None:
        self.transforms.append(TextPattern(name, re.compile(pattern, flags)))

    def is_source(self, node: SyntaxNode) -> bool:
        return any(p.matches(node) for p in self.sources)

    def is_transform(self, node: SyntaxNode) -> bool:
        return any(p.matches(node) for p in self.transforms)

    def sink_kinds(self, node: SyntaxNode) -> List[str]:
        """Kinds of every sink recognizer matching ``node``, in catalog order."""
        return [s.kind for s in self.sinks if s.match(node)]


def default_catalog() -> PatternCatalog:
    return PatternCatalog()
