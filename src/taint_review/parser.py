"""
JavaScript, TypeScript and HTML parser producing a normalized syntax tree.

This module turns the text of one changed file into a ``SyntaxTree`` whose
nodes are tagged with the handful of syntactic categories the pattern
catalog cares about. Files that cannot be parsed yield a ``ParseFailure``
instead of raising, since diff-derived sources are frequently incomplete.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import esprima
import tree_sitter_typescript
from bs4 import BeautifulSoup
from tree_sitter import Language, Parser

TYPESCRIPT_LANGUAGE = Language(tree_sitter_typescript.language_typescript())
TSX_LANGUAGE = Language(tree_sitter_typescript.language_tsx())

# Upper bound on the source slice kept per node
SNIPPET_LIMIT = 200


class NodeKind(Enum):
    """Syntactic categories recognizers dispatch on."""
    IDENTIFIER = "identifier"
    MEMBER = "member"
    CALL = "call"
    MARKUP_ATTRIBUTE = "markup_attribute"
    OTHER = "other"


@dataclass(frozen=True)
class SyntaxNode:
    """
    A backend-independent tree node.

    ``callee`` is set on calls, ``obj``/``prop`` on member accesses; both
    point at nodes that are also present in ``children``.
    """
    kind: NodeKind
    start_line: int
    end_line: int
    text: str
    offset: int
    end_offset: int
    name: Optional[str] = None
    callee: Optional["SyntaxNode"] = None
    obj: Optional["SyntaxNode"] = None
    prop: Optional["SyntaxNode"] = None
    children: Tuple["SyntaxNode", ...] = ()


@dataclass(frozen=True)
class SyntaxTree:
    file: str
    root: SyntaxNode
    backend: str

    def walk(self) -> Iterator[SyntaxNode]:
        """Yield every node once, pre-order, in source position order."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True)
class ParseFailure:
    file: str
    reason: str


ParseResult = Union[SyntaxTree, ParseFailure]


_ESPRIMA_KINDS = {
    "Identifier": NodeKind.IDENTIFIER,
    "MemberExpression": NodeKind.MEMBER,
    "CallExpression": NodeKind.CALL,
    "JSXAttribute": NodeKind.MARKUP_ATTRIBUTE,
}

_TREE_SITTER_KINDS = {
    "identifier": NodeKind.IDENTIFIER,
    "property_identifier": NodeKind.IDENTIFIER,
    "shorthand_property_identifier": NodeKind.IDENTIFIER,
    "member_expression": NodeKind.MEMBER,
    "call_expression": NodeKind.CALL,
    "jsx_attribute": NodeKind.MARKUP_ATTRIBUTE,
}

_ESPRIMA_SKIP_KEYS = frozenset({"loc", "range", "leadingComments", "trailingComments", "errors"})

_SCRIPT_TYPES = frozenset({
    "",
    "text/javascript",
    "application/javascript",
    "module",
    "text/babel",
    "text/jsx",
})


class JavaScriptParser:
    """
    Parser for JavaScript, TypeScript and HTML sources.

    Plain JavaScript goes through esprima first. ``.ts``/``.mts``/``.cts``
    files use the tree-sitter TypeScript grammar, which keeps angle-bracket
    type assertions. ``.tsx`` files, and anything esprima rejects, use the
    TSX grammar, which accepts both markup attributes and type annotations.
    HTML files contribute their inline ``<script>`` bodies.

    A parser owns tree-sitter ``Parser`` objects and must not be shared
    between threads.
    """

    JS_SUFFIXES = frozenset({".js", ".jsx", ".mjs", ".cjs"})
    TSX_SUFFIXES = frozenset({".tsx"})
    TS_SUFFIXES = frozenset({".ts", ".mts", ".cts"})
    HTML_SUFFIXES = frozenset({".html", ".htm"})
    SUPPORTED_SUFFIXES = JS_SUFFIXES | TS_SUFFIXES | TSX_SUFFIXES | HTML_SUFFIXES

    def __init__(self, verbose: bool = False):
        """
        Initialize the parser.

        Args:
            verbose: Enable verbose output
        """
        self.verbose = verbose
        self._ts_parser = Parser(TYPESCRIPT_LANGUAGE)
        self._tsx_parser = Parser(TSX_LANGUAGE)

    def parse_file(self, file_path: Path) -> ParseResult:
        """
        Parse a source file from disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        if self.verbose:
            print(f"Parsing file: {file_path}")

        content = file_path.read_text(encoding="utf-8", errors="ignore")
        return self.parse(content, str(file_path))

    def parse(self, code: str, filename: str = "<string>") -> ParseResult:
        """
        Parse source text into a ``SyntaxTree``.

        The file suffix selects the front end. This method never raises;
        any failure is reported as a ``ParseFailure``.

        Args:
            code: Source text
            filename: Path used for suffix detection and locations

        Returns:
            ``SyntaxTree`` on success, ``ParseFailure`` otherwise
        """
        suffix = Path(filename).suffix.lower()
        try:
            if suffix in self.HTML_SUFFIXES:
                return self._parse_html(code, filename)
            return self._parse_script(code, filename, suffix)
        except Exception as e:
            if self.verbose:
                print(f"Warning: Could not parse {filename}: {e}")
            return ParseFailure(filename, str(e))

    def _parse_script(self, code: str, filename: str, suffix: str,
                      line_offset: int = 0, offset_base: int = 0) -> ParseResult:
        if suffix not in self.TS_SUFFIXES and suffix not in self.TSX_SUFFIXES:
            ast = self._parse_with_esprima(code, filename)
            if ast is not None:
                root = self._convert_esprima(ast, code, line_offset, offset_base)
                return SyntaxTree(filename, root, "esprima")

        source = code.encode("utf-8")
        if suffix in self.TS_SUFFIXES:
            tree = self._ts_parser.parse(source)
        else:
            tree = self._tsx_parser.parse(source)
        if tree.root_node.has_error:
            if self.verbose:
                print(f"Warning: tree-sitter found syntax errors in {filename}")
            return ParseFailure(filename, "syntax error")
        root = self._convert_tree_sitter(tree.root_node, source, line_offset, offset_base)
        return SyntaxTree(filename, root, "tree-sitter")

    def _parse_with_esprima(self, code: str, filename: str) -> Optional[Dict[str, Any]]:
        """Try parseScript first, then fall back to parseModule."""
        parse_kwargs = {"loc": True, "range": True, "tolerant": True, "jsx": True}
        error = None
        for parse in (esprima.parseScript, esprima.parseModule):
            try:
                return parse(code, **parse_kwargs).toDict()
            except Exception as e:  # esprima.Error on bad syntax
                error = e
        if self.verbose:
            print(f"Warning: esprima could not parse {filename} ({error}), trying tree-sitter")
        return None

    def _parse_html(self, content: str, filename: str) -> ParseResult:
        """
        Parse the inline scripts of an HTML document.

        Script line numbers are shifted so that locations refer to the
        HTML file itself.
        """
        # lxml hands back script bodies with "\n" line endings
        content = content.replace("\r\n", "\n").replace("\r", "\n")
        soup = BeautifulSoup(content, "lxml")
        roots: List[SyntaxNode] = []
        failures = 0
        cursor = 0

        for script in soup.find_all("script"):
            body = script.string
            if not body or not body.strip():
                continue
            if script.get("type", "").strip().lower() not in _SCRIPT_TYPES:
                continue

            position = content.find(body, cursor)
            if position < 0:
                if self.verbose:
                    print(f"Warning: Could not locate inline script in {filename}")
                failures += 1
                continue
            cursor = position + len(body)

            line_offset = content.count("\n", 0, position)
            result = self._parse_script(body, filename, ".js", line_offset, position)
            if isinstance(result, ParseFailure):
                failures += 1
                continue
            roots.append(result.root)

        if failures and not roots:
            return ParseFailure(filename, "no inline script could be parsed")

        root = SyntaxNode(
            kind=NodeKind.OTHER,
            start_line=1,
            end_line=content.count("\n") + 1,
            text=content[:SNIPPET_LIMIT],
            offset=0,
            end_offset=len(content),
            children=tuple(roots),
        )
        return SyntaxTree(filename, root, "html")

    def _convert_esprima(self, node: Dict[str, Any], code: str,
                         line_offset: int, offset_base: int) -> SyntaxNode:
        """Convert an esprima dict node and its subtree."""
        links: Dict[str, SyntaxNode] = {}
        children: List[SyntaxNode] = []
        for key, value in node.items():
            if key in _ESPRIMA_SKIP_KEYS:
                continue
            if isinstance(value, dict) and "type" in value:
                child = self._convert_esprima(value, code, line_offset, offset_base)
                links[key] = child
                children.append(child)
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, dict) and "type" in item:
                        children.append(self._convert_esprima(item, code, line_offset, offset_base))
        # dict key order is not source order
        children.sort(key=lambda child: child.offset)

        kind = _ESPRIMA_KINDS.get(node.get("type"), NodeKind.OTHER)
        start, end = node.get("range") or (0, 0)
        loc = node.get("loc") or {}

        name = None
        if kind is NodeKind.IDENTIFIER:
            name = node.get("name")
        elif kind is NodeKind.MARKUP_ATTRIBUTE and "name" in links:
            name = links["name"].text

        return SyntaxNode(
            kind=kind,
            start_line=loc.get("start", {}).get("line", 1) + line_offset,
            end_line=loc.get("end", {}).get("line", 1) + line_offset,
            text=code[start:end][:SNIPPET_LIMIT],
            offset=offset_base + start,
            end_offset=offset_base + end,
            name=name,
            callee=links.get("callee") if kind is NodeKind.CALL else None,
            obj=links.get("object") if kind is NodeKind.MEMBER else None,
            prop=links.get("property") if kind is NodeKind.MEMBER else None,
            children=tuple(children),
        )

    def _convert_tree_sitter(self, node: Any, source: bytes,
                             line_offset: int, offset_base: int) -> SyntaxNode:
        """Convert a tree-sitter node and its named descendants."""
        pairs = [
            (child, self._convert_tree_sitter(child, source, line_offset, offset_base))
            for child in node.named_children
        ]
        pairs.sort(key=lambda pair: pair[0].start_byte)
        children = tuple(converted for _, converted in pairs)

        def field(field_name: str) -> Optional[SyntaxNode]:
            target = node.child_by_field_name(field_name)
            if target is None:
                return None
            for child, converted in pairs:
                if (child.start_byte, child.end_byte, child.type) == (
                        target.start_byte, target.end_byte, target.type):
                    return converted
            return None

        kind = _TREE_SITTER_KINDS.get(node.type, NodeKind.OTHER)
        # 4 bytes per character at most in UTF-8
        raw = source[node.start_byte:node.end_byte][:SNIPPET_LIMIT * 4]
        text = raw.decode("utf-8", errors="replace")[:SNIPPET_LIMIT]

        name = None
        callee = obj = prop = None
        if kind is NodeKind.IDENTIFIER:
            name = text
        elif kind is NodeKind.MARKUP_ATTRIBUTE and children:
            name = children[0].text
        elif kind is NodeKind.CALL:
            callee = field("function")
        elif kind is NodeKind.MEMBER:
            obj = field("object")
            prop = field("property")

        return SyntaxNode(
            kind=kind,
            start_line=node.start_point[0] + 1 + line_offset,
            end_line=node.end_point[0] + 1 + line_offset,
            text=text,
            offset=offset_base + node.start_byte,
            end_offset=offset_base + node.end_byte,
            name=name,
            callee=callee,
            obj=obj,
            prop=prop,
            children=children,
        )
