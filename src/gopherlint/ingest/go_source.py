"""Read Go source files through the tree-sitter Go grammar.

The syntax tree is reduced to what the build context and the built-in lint
rules need: the package clause, imports, and top-level declarations together
with their doc comments, plus the token stream and every comment. Syntax
problems are recorded on the returned :class:`GoFile` and the best-effort tree
is still read. Positions are 1-based lines and 1-based byte columns.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import tree_sitter
import tree_sitter_go

from gopherlint.exceptions import SourceSyntaxError

KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer",
        "else", "fallthrough", "for", "func", "go", "goto", "if", "import",
        "interface", "map", "package", "range", "return", "select", "struct",
        "switch", "type", "var",
    }
)

_DIRECTIVE_RE = re.compile(r"^//(line |extern |export |[a-z0-9]+:[a-z0-9])")

# Node types read as a single token even when the grammar gives them children.
_ATOMIC_TYPES = frozenset(
    {"interpreted_string_literal", "raw_string_literal", "rune_literal"}
)
_IDENT_TYPES = frozenset(
    {
        "identifier", "field_identifier", "type_identifier",
        "package_identifier", "label_name", "blank_identifier",
        "true", "false", "nil", "iota",
    }
)
_NUMBER_TYPES = frozenset({"int_literal", "float_literal", "imaginary_literal"})
_STRING_TYPES = frozenset({"interpreted_string_literal", "raw_string_literal"})
_SPEC_TYPES = {
    "type": frozenset({"type_spec", "type_alias"}),
    "var": frozenset({"var_spec"}),
    "const": frozenset({"const_spec"}),
}
_GEN_DECL_KINDS = {
    "type_declaration": "type",
    "var_declaration": "var",
    "const_declaration": "const",
}


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    line: int
    column: int


@dataclass(frozen=True)
class Comment:
    text: str
    line: int
    column: int
    end_line: int
    standalone: bool


@dataclass(frozen=True)
class CommentGroup:
    comments: tuple[Comment, ...]

    @property
    def line(self) -> int:
        return self.comments[0].line

    @property
    def end_line(self) -> int:
        return self.comments[-1].end_line

    def text(self) -> str:
        """Comment text without markers, like go/ast's CommentGroup.Text."""
        lines: list[str] = []
        for comment in self.comments:
            raw = comment.text
            if _DIRECTIVE_RE.match(raw):
                continue
            if raw.startswith("//"):
                body = raw[2:]
                if body.startswith(" "):
                    body = body[1:]
                lines.append(body)
            else:
                lines.extend(raw[2:-2].split("\n"))
        lines = [line.rstrip() for line in lines]
        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
        if not lines:
            return ""
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class Import:
    name: str | None
    path: str
    line: int
    column: int
    doc: CommentGroup | None = None
    comment: Comment | None = None


@dataclass(frozen=True)
class Decl:
    kind: str
    name: str
    line: int
    column: int
    doc: CommentGroup | None = None
    receiver_name: str | None = None
    receiver_type: str | None = None
    receiver_line: int = 0
    receiver_column: int = 0
    in_group: bool = False
    group_doc: CommentGroup | None = None

    @property
    def exported(self) -> bool:
        return is_exported(self.name)


@dataclass
class GoFile:
    filename: str
    source: str
    package_name: str = ""
    package_line: int = 0
    package_column: int = 0
    package_doc: CommentGroup | None = None
    imports: list[Import] = field(default_factory=list)
    decls: list[Decl] = field(default_factory=list)
    tokens: list[Token] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    comment_groups: list[CommentGroup] = field(default_factory=list)
    errors: list[SourceSyntaxError] = field(default_factory=list)

    @property
    def is_test(self) -> bool:
        return self.filename.endswith("_test.go")

    def line_text(self, line: int) -> str:
        lines = self.source.splitlines()
        if 1 <= line <= len(lines):
            return lines[line - 1]
        return ""

    def header_comments(self) -> list[Comment]:
        """Comments that appear before the package clause."""
        if not self.package_line:
            return list(self.comments)
        return [comment for comment in self.comments if comment.end_line < self.package_line]


def is_exported(name: str) -> bool:
    return bool(name) and name[0].isupper()


def decode_source(data: bytes | str) -> str:
    if isinstance(data, bytes):
        text = data.decode("utf-8", errors="replace")
    else:
        text = data
    if text.startswith("\ufeff"):
        text = text[1:]
    return text


_parser_cache: dict[str, tree_sitter.Parser] = {}


def _get_parser() -> tree_sitter.Parser:
    """Get or create the cached Go parser."""
    parser = _parser_cache.get("go")
    if parser is None:
        parser = tree_sitter.Parser(tree_sitter.Language(tree_sitter_go.language()))
        _parser_cache["go"] = parser
    return parser


def parse_tree(source: str) -> tree_sitter.Tree:
    return _get_parser().parse(source.encode("utf-8"))


def _position(node: tree_sitter.Node) -> tuple[int, int]:
    row, column = node.start_point
    return row + 1, column + 1


def _text(node: tree_sitter.Node) -> str:
    raw = node.text
    return raw.decode("utf-8", errors="replace") if raw is not None else ""


def _iter_leaves(root: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in _ATOMIC_TYPES or node.child_count == 0:
            yield node
            continue
        stack.extend(reversed(node.children))


def _token_kind(node: tree_sitter.Node) -> str:
    if node.type in _IDENT_TYPES:
        return "ident"
    if node.type in _NUMBER_TYPES:
        return "number"
    if node.type in _STRING_TYPES:
        return "string"
    if node.type == "rune_literal":
        return "char"
    if not node.is_named and node.type in KEYWORDS:
        return "keyword"
    return "op"


def _collect_tokens(root: tree_sitter.Node) -> tuple[list[Token], list[Comment]]:
    tokens: list[Token] = []
    comments: list[Comment] = []
    last_code_line = 0
    for node in _iter_leaves(root):
        if node.is_missing:
            continue
        line, column = _position(node)
        text = _text(node)
        if node.type == "comment":
            comments.append(
                Comment(text.rstrip("\r"), line, column, node.end_point[0] + 1, last_code_line != line)
            )
            continue
        if not text.strip():
            continue
        tokens.append(Token(_token_kind(node), text, line, column))
        last_code_line = node.end_point[0] + 1
    return tokens, comments


def _syntax_errors(filename: str, root: tree_sitter.Node) -> list[SourceSyntaxError]:
    errors: list[SourceSyntaxError] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR":
            line, column = _position(node)
            snippet = _text(node).split("\n", 1)[0].strip()[:24]
            found = repr(snippet) if snippet else "EOF"
            errors.append(SourceSyntaxError(filename, line, column, f"syntax error: unexpected {found}"))
            continue
        if node.is_missing:
            line, column = _position(node)
            errors.append(SourceSyntaxError(filename, line, column, f"syntax error: missing {node.type!r}"))
            continue
        if node.has_error:
            stack.extend(reversed(node.children))
    return errors


def tokenize(filename: str, source: str) -> tuple[list[Token], list[Comment], list[SourceSyntaxError]]:
    root = parse_tree(source).root_node
    tokens, comments = _collect_tokens(root)
    return tokens, comments, _syntax_errors(filename, root)


def group_comments(comments: list[Comment]) -> list[CommentGroup]:
    groups: list[CommentGroup] = []
    current: list[Comment] = []
    for comment in comments:
        if current and (
            comment.line > current[-1].end_line + 1
            or comment.standalone != current[-1].standalone
        ):
            groups.append(CommentGroup(tuple(current)))
            current = []
        current.append(comment)
    if current:
        groups.append(CommentGroup(tuple(current)))
    return groups


def _specs(node: tree_sitter.Node, spec_types: frozenset[str]) -> tuple[list[tree_sitter.Node], bool]:
    """Spec children of a declaration, and whether they sit in a ( ... ) group."""
    specs: list[tree_sitter.Node] = []
    grouped = False
    for child in node.children:
        if child.type == "(":
            grouped = True
        elif child.type.endswith("_spec_list"):
            grouped = True
            specs.extend(spec for spec in child.named_children if spec.type in spec_types)
        elif child.type in spec_types:
            specs.append(child)
    return specs, grouped


def _first_of_type(node: tree_sitter.Node | None, node_type: str) -> tree_sitter.Node | None:
    if node is None:
        return None
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == node_type:
            return current
        stack.extend(reversed(current.named_children))
    return None


class _TreeReader:
    def __init__(self, gofile: GoFile) -> None:
        self.file = gofile
        self._docs = {
            group.end_line: group
            for group in gofile.comment_groups
            if group.comments[0].standalone
        }

    def _doc_for(self, line: int) -> CommentGroup | None:
        return self._docs.get(line - 1)

    def _line_comment_for(self, line: int) -> Comment | None:
        for comment in self.file.comments:
            if comment.line == line and not comment.standalone:
                return comment
        return None

    def _error(self, node: tree_sitter.Node | None, message: str) -> None:
        if node is None:
            line, column = self.file.source.count("\n") + 1, 1
        else:
            line, column = _position(node)
        self.file.errors.append(SourceSyntaxError(self.file.filename, line, column, message))

    def read(self, root: tree_sitter.Node) -> None:
        top: list[tree_sitter.Node] = []
        for child in root.named_children:
            if child.type == "ERROR":
                top.extend(child.named_children)
            else:
                top.append(child)
        first = next((node for node in top if node.type != "comment"), None)
        if first is None or first.type != "package_clause":
            if first is None:
                found = "EOF"
            else:
                found = repr(_text(next(_iter_leaves(first))))
            self._error(first, f"expected 'package', found {found}")
            return
        self._package(first)
        for node in top:
            if node.type == "import_declaration":
                self._imports(node)
            elif node.type in {"function_declaration", "method_declaration"}:
                self._func(node)
            elif node.type in _GEN_DECL_KINDS:
                self._gen_decl(node, _GEN_DECL_KINDS[node.type])

    def _package(self, node: tree_sitter.Node) -> None:
        line, column = _position(node)
        self.file.package_line = line
        self.file.package_column = column
        self.file.package_doc = self._doc_for(line)
        name = _first_of_type(node, "package_identifier")
        if name is None:
            self._error(node, "expected package name")
            return
        self.file.package_name = _text(name)

    def _imports(self, node: tree_sitter.Node) -> None:
        specs, grouped = _specs(node, frozenset({"import_spec"}))
        decl_line, _ = _position(node)
        for spec in specs:
            path = spec.child_by_field_name("path")
            if path is None:
                continue
            name = spec.child_by_field_name("name")
            line, column = _position(spec)
            self.file.imports.append(
                Import(
                    name=_text(name) if name is not None else None,
                    path=_text(path).strip('"`'),
                    line=line,
                    column=column,
                    doc=self._doc_for(line if grouped else decl_line),
                    comment=self._line_comment_for(line),
                )
            )

    def _func(self, node: tree_sitter.Node) -> None:
        name = node.child_by_field_name("name")
        if name is None:
            return
        receiver_name: str | None = None
        receiver_type: str | None = None
        receiver_line = receiver_column = 0
        if node.type == "method_declaration":
            param = _first_of_type(node.child_by_field_name("receiver"), "parameter_declaration")
            if param is not None:
                param_name = param.child_by_field_name("name")
                if param_name is not None:
                    receiver_name = _text(param_name)
                    receiver_line, receiver_column = _position(param_name)
                type_name = _first_of_type(param.child_by_field_name("type"), "type_identifier")
                if type_name is not None:
                    receiver_type = _text(type_name)
        line, column = _position(name)
        self.file.decls.append(
            Decl(
                kind="method" if node.type == "method_declaration" else "func",
                name=_text(name),
                line=line,
                column=column,
                doc=self._doc_for(_position(node)[0]),
                receiver_name=receiver_name,
                receiver_type=receiver_type,
                receiver_line=receiver_line,
                receiver_column=receiver_column,
            )
        )

    def _gen_decl(self, node: tree_sitter.Node, kind: str) -> None:
        specs, grouped = _specs(node, _SPEC_TYPES[kind])
        decl_line, _ = _position(node)
        group_doc = self._doc_for(decl_line) if grouped else None
        for spec in specs:
            doc = self._doc_for(_position(spec)[0] if grouped else decl_line)
            for name in spec.children_by_field_name("name"):
                line, column = _position(name)
                self.file.decls.append(
                    Decl(
                        kind=kind,
                        name=_text(name),
                        line=line,
                        column=column,
                        doc=doc,
                        in_group=grouped,
                        group_doc=group_doc,
                    )
                )


def parse_file(
    filename: str | Path,
    source: bytes | str,
    *,
    parse_comments: bool = True,
) -> GoFile:
    name = str(filename)
    text = decode_source(source)
    root = parse_tree(text).root_node
    tokens, comments = _collect_tokens(root)
    gofile = GoFile(filename=name, source=text, tokens=tokens, errors=_syntax_errors(name, root))
    gofile.comments = comments
    gofile.comment_groups = group_comments(comments)
    _TreeReader(gofile).read(root)
    if not parse_comments:
        gofile.comments = []
        gofile.comment_groups = []
        gofile.package_doc = None
        gofile.imports = [
            Import(imp.name, imp.path, imp.line, imp.column) for imp in gofile.imports
        ]
        gofile.decls = [
            Decl(
                kind=decl.kind,
                name=decl.name,
                line=decl.line,
                column=decl.column,
                receiver_name=decl.receiver_name,
                receiver_type=decl.receiver_type,
                receiver_line=decl.receiver_line,
                receiver_column=decl.receiver_column,
            )
            for decl in gofile.decls
        ]
    return gofile
