from __future__ import annotations

from pathlib import Path

import pytest

from gopherlint.exceptions import (
    ImportResolutionError,
    MultiplePackageError,
    NoGoError,
    PackageMetadataError,
)
from gopherlint.ingest.go_build import BuildContext, find_module


def test_import_dir_partitions_files(write_tree, build_context: BuildContext) -> None:
    root = write_tree(
        {
            "pkg/a.go": "package pkg\n",
            "pkg/b.go": "package pkg\n",
            "pkg/a_test.go": "package pkg\n",
            "pkg/ext_test.go": "package pkg_test\n",
            "pkg/_scratch.go": "package scratch\n",
            "pkg/.hidden.go": "package hidden\n",
            "pkg/sys_windows.go": "package pkg\n",
            "pkg/tagged.go": "//go:build ignore\n\npackage main\n",
            "pkg/notes.txt": "not go\n",
        }
    )
    pkg = build_context.import_dir(root / "pkg")
    assert pkg.name == "pkg"
    assert pkg.go_files == ("a.go", "b.go")
    assert pkg.test_go_files == ("a_test.go",)
    assert pkg.xtest_go_files == ("ext_test.go",)
    assert pkg.ignored_go_files == (".hidden.go", "_scratch.go", "sys_windows.go", "tagged.go")


def test_import_dir_only_external_tests(write_tree, build_context: BuildContext) -> None:
    root = write_tree({"pkg/x_test.go": "package pkg_test\n"})
    pkg = build_context.import_dir(root / "pkg")
    assert pkg.name == "pkg"
    assert pkg.go_files == ()
    assert pkg.xtest_go_files == ("x_test.go",)


def test_import_dir_without_go_files(write_tree, build_context: BuildContext) -> None:
    root = write_tree({"docs/readme.md": "hi\n", "gen/_tmp.go": "package gen\n"})
    with pytest.raises(NoGoError):
        build_context.import_dir(root / "docs")
    with pytest.raises(NoGoError):
        build_context.import_dir(root / "gen")


def test_import_dir_multiple_packages(write_tree, build_context: BuildContext) -> None:
    root = write_tree({"mix/a.go": "package one\n", "mix/b.go": "package two\n"})
    with pytest.raises(MultiplePackageError) as excinfo:
        build_context.import_dir(root / "mix")
    assert excinfo.value.packages == ("one", "two")
    assert excinfo.value.files == ("a.go", "b.go")
    assert "found packages one (a.go) and two (b.go)" in str(excinfo.value)


def test_import_dir_missing_directory(tmp_path: Path, build_context: BuildContext) -> None:
    with pytest.raises(PackageMetadataError) as excinfo:
        build_context.import_dir(tmp_path / "nope")
    assert not isinstance(excinfo.value, NoGoError)


def test_import_dir_missing_package_clause(write_tree, build_context: BuildContext) -> None:
    root = write_tree({"bad/a.go": "func main() {}\n"})
    with pytest.raises(PackageMetadataError, match="expected 'package'"):
        build_context.import_dir(root / "bad")


def test_import_dir_bad_constraint(write_tree, build_context: BuildContext) -> None:
    root = write_tree({"bad/a.go": "//go:build linux &&\n\npackage bad\n"})
    with pytest.raises(PackageMetadataError, match="go:build"):
        build_context.import_dir(root / "bad")


def test_cgo_files_follow_cgo_setting(write_tree) -> None:
    root = write_tree(
        {
            "c/a.go": "package c\n",
            "c/cgo.go": 'package c\n\nimport "C"\n',
        }
    )
    without = BuildContext(goos="linux", goarch="amd64").import_dir(root / "c")
    assert without.cgo_files == ()
    assert without.ignored_go_files == ("cgo.go",)
    with_cgo = BuildContext(goos="linux", goarch="amd64", cgo_enabled=True).import_dir(root / "c")
    assert with_cgo.cgo_files == ("cgo.go",)


def test_build_tags_enable_files(write_tree) -> None:
    root = write_tree(
        {
            "t/a.go": "package t\n",
            "t/extra.go": "// +build integration\n\npackage t\n",
        }
    )
    plain = BuildContext(goos="linux", goarch="amd64").import_dir(root / "t")
    assert plain.go_files == ("a.go",)
    tagged = BuildContext(goos="linux", goarch="amd64", build_tags=("integration",))
    assert tagged.import_dir(root / "t").go_files == ("a.go", "extra.go")


def test_match_tag() -> None:
    ctx = BuildContext(goos="darwin", goarch="arm64", build_tags=("custom",))
    assert ctx.match_tag("darwin")
    assert ctx.match_tag("arm64")
    assert ctx.match_tag("unix")
    assert ctx.match_tag("gc")
    assert ctx.match_tag("go1.18")
    assert not ctx.match_tag("go1.99")
    assert ctx.match_tag("custom")
    assert not ctx.match_tag("cgo")
    assert not ctx.match_tag("ignore")
    assert not ctx.match_tag("linux")


def test_from_env_reads_go_variables(tmp_path: Path) -> None:
    ctx = BuildContext.from_env(
        {
            "GOOS": "windows",
            "GOARCH": "386",
            "GOROOT": "/usr/lib/go",
            "GOPATH": f"{tmp_path / 'a'}:{tmp_path / 'b'}",
            "CGO_ENABLED": "1",
        },
        tags=["x"],
    )
    assert (ctx.goos, ctx.goarch, ctx.goroot) == ("windows", "386", "/usr/lib/go")
    assert ctx.gopath == (str(tmp_path / "a"), str(tmp_path / "b"))
    assert ctx.cgo_enabled
    assert ctx.build_tags == ("x",)


def test_from_env_defaults_gopath_to_home() -> None:
    ctx = BuildContext.from_env({"GOOS": "linux", "GOARCH": "amd64"})
    assert ctx.gopath == (str(Path.home() / "go"),)
    assert not ctx.cgo_enabled


def test_find_module(write_tree) -> None:
    root = write_tree({"go.mod": "module example.com/demo\n\ngo 1.22\n", "sub/x.go": "package x\n"})
    found = find_module(root / "sub")
    assert found is not None
    assert found[0] == "example.com/demo"
    assert found[1] == root.resolve()


def test_import_path_within_module(write_tree, build_context: BuildContext) -> None:
    root = write_tree(
        {
            "go.mod": "module example.com/demo\n",
            "lib/lib.go": "package lib\n",
        }
    )
    pkg = build_context.import_path("example.com/demo/lib", src_dir=root)
    assert pkg.name == "lib"
    assert pkg.import_path == "example.com/demo/lib"
    assert Path(pkg.dir) == root.resolve() / "lib"


def test_import_path_from_gopath_and_goroot(tmp_path: Path, write_tree) -> None:
    write_tree(
        {
            "gopath/src/github.com/x/util/u.go": "package util\n",
            "goroot/src/strings/s.go": "package strings\n",
            "work/.keep": "",
        }
    )
    ctx = BuildContext(
        goos="linux",
        goarch="amd64",
        goroot=str(tmp_path / "goroot"),
        gopath=(str(tmp_path / "gopath"),),
    )
    assert ctx.import_path("github.com/x/util", src_dir=tmp_path / "work").name == "util"
    assert ctx.import_path("strings", src_dir=tmp_path / "work").name == "strings"


def test_import_path_relative(write_tree, build_context: BuildContext) -> None:
    root = write_tree({"lib/lib.go": "package lib\n"})
    pkg = build_context.import_path("./lib", src_dir=root)
    assert pkg.name == "lib"
    assert pkg.import_path == "./lib"


def test_import_path_not_found_lists_candidates(tmp_path: Path) -> None:
    ctx = BuildContext(goos="linux", goarch="amd64", gopath=(str(tmp_path / "gp"),))
    with pytest.raises(ImportResolutionError) as excinfo:
        ctx.import_path("example.com/missing", src_dir=tmp_path)
    message = str(excinfo.value)
    assert message.startswith('cannot find package "example.com/missing" in any of:')
    assert "(from $GOPATH)" in message
    assert excinfo.value.import_path == "example.com/missing"
