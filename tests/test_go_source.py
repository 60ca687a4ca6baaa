from __future__ import annotations

import textwrap

from gopherlint.ingest.go_source import group_comments, parse_file, tokenize


def _parse(source: str, filename: str = "x.go", **kwargs):
    return parse_file(filename, textwrap.dedent(source).lstrip("\n"), **kwargs)


def test_package_clause_and_doc() -> None:
    gofile = _parse(
        """
        // Package demo does things.
        package demo
        """
    )
    assert gofile.package_name == "demo"
    assert gofile.package_line == 2
    assert gofile.package_column == 1
    assert gofile.package_doc is not None
    assert gofile.package_doc.text() == "Package demo does things.\n"
    assert gofile.errors == []


def test_missing_package_clause_is_a_syntax_error() -> None:
    gofile = _parse("func main() {}\n")
    assert gofile.package_name == ""
    assert len(gofile.errors) == 1
    assert "expected 'package'" in gofile.errors[0].message
    assert str(gofile.errors[0]).startswith("x.go:1:1: ")


def test_bom_is_stripped() -> None:
    gofile = parse_file("x.go", b"\xef\xbb\xbfpackage demo\n")
    assert gofile.package_name == "demo"
    assert gofile.package_column == 1


def test_imports_single_and_grouped() -> None:
    gofile = _parse(
        """
        package demo

        import "fmt"

        import (
        \t"os"
        \t. "strings"
        \t_ "embed" // for go:embed
        \tjson "encoding/json"
        )
        """
    )
    assert [(imp.name, imp.path) for imp in gofile.imports] == [
        (None, "fmt"),
        (None, "os"),
        (".", "strings"),
        ("_", "embed"),
        ("json", "encoding/json"),
    ]
    blank = gofile.imports[3]
    assert blank.comment is not None
    assert blank.comment.text == "// for go:embed"


def test_funcs_methods_and_receivers() -> None:
    gofile = _parse(
        """
        package demo

        // Run runs.
        func Run() {}

        func (s *Server) Start(ctx context.Context) error {
        \treturn nil
        }

        func (Server) Stop() {}

        func (l List[T]) Len() int { return 0 }
        """
    )
    decls = [(d.kind, d.name, d.receiver_name, d.receiver_type) for d in gofile.decls]
    assert decls == [
        ("func", "Run", None, None),
        ("method", "Start", "s", "Server"),
        ("method", "Stop", None, "Server"),
        ("method", "Len", "l", "List"),
    ]
    assert gofile.decls[0].doc is not None
    assert gofile.decls[0].doc.text() == "Run runs.\n"
    assert gofile.decls[1].doc is None
    assert (gofile.decls[1].receiver_line, gofile.decls[1].receiver_column) == (6, 7)


def test_function_literals_inside_bodies_are_not_declarations() -> None:
    gofile = _parse(
        """
        package demo

        var handler = func() {
        \tfunc() {}()
        }

        func outer() {
        \tvar inner = 1
        \t_ = inner
        }
        """
    )
    assert [(d.kind, d.name) for d in gofile.decls] == [("var", "handler"), ("func", "outer")]


def test_grouped_declarations_carry_group_doc() -> None:
    gofile = _parse(
        """
        package demo

        // Limits for the pool.
        const (
        \t// MaxSize is the cap.
        \tMaxSize = 10
        \tMinSize, DefaultSize = 1,
        \t\t2
        )

        type Pair struct {
        \tA int
        }
        """
    )
    decls = {d.name: d for d in gofile.decls}
    assert list(decls) == ["MaxSize", "MinSize", "DefaultSize", "Pair"]
    assert decls["MaxSize"].in_group
    assert decls["MaxSize"].doc is not None
    assert decls["MinSize"].doc is None
    assert decls["MinSize"].group_doc is not None
    assert decls["MinSize"].group_doc.text() == "Limits for the pool.\n"
    assert not decls["Pair"].in_group


def test_unterminated_literals_are_reported() -> None:
    gofile = _parse('package demo\n\nvar s = "oops\n')
    assert gofile.errors
    assert all(error.message.startswith("syntax error") for error in gofile.errors)
    assert gofile.errors[0].line >= 3
    assert gofile.package_name == "demo"


def test_unbalanced_braces_are_reported() -> None:
    gofile = _parse("package demo\n\nfunc f() {\n")
    assert gofile.errors
    assert all(error.filename == "x.go" for error in gofile.errors)


def test_parse_comments_off_drops_docs() -> None:
    gofile = _parse(
        """
        // Package demo.
        package demo

        // F does.
        func F() {}
        """,
        parse_comments=False,
    )
    assert gofile.package_doc is None
    assert gofile.comments == []
    assert gofile.decls[0].doc is None


def test_tokens_positions_and_kinds() -> None:
    tokens, comments, errors = tokenize("t.go", "x += 1 // add\ny := `a\nb`\n")
    assert [(t.kind, t.text, t.line, t.column) for t in tokens] == [
        ("ident", "x", 1, 1),
        ("op", "+=", 1, 3),
        ("number", "1", 1, 6),
        ("ident", "y", 2, 1),
        ("op", ":=", 2, 3),
        ("string", "`a\nb`", 2, 6),
    ]
    assert len(comments) == 1 and not comments[0].standalone


def test_comment_groups_split_on_blank_lines() -> None:
    _tokens, comments, _errors = tokenize("t.go", "// a\n// b\n\n// c\n")
    groups = group_comments(comments)
    assert [group.text() for group in groups] == ["a\nb\n", "c\n"]


def test_directives_are_hidden_from_comment_text() -> None:
    _tokens, comments, _errors = tokenize("t.go", "//go:generate stringer\n// Doc line.\n")
    assert group_comments(comments)[0].text() == "Doc line.\n"


def test_header_comments_and_line_text() -> None:
    gofile = _parse(
        """
        //go:build linux

        package demo
        """
    )
    assert [c.text for c in gofile.header_comments()] == ["//go:build linux"]
    assert gofile.line_text(3) == "package demo"
    assert gofile.line_text(99) == ""


def test_columns_count_bytes_after_multibyte_text() -> None:
    tokens, _comments, _errors = tokenize(
        "t.go", 'package demo\n\nfunc f() {\n\tx := "éé"; my_var := 1\n}\n'
    )
    found = [(t.line, t.column) for t in tokens if t.text == "my_var"]
    assert found == [(4, 15)]


def test_decl_columns_count_bytes() -> None:
    gofile = _parse('package demo\n\nvar s = "日本"; var Later = 1\n')
    later = next(decl for decl in gofile.decls if decl.name == "Later")
    assert (later.line, later.column) == (3, 23)
