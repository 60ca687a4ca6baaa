from __future__ import annotations

import os
import platform
import re
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from gopherlint.exceptions import (
    ImportResolutionError,
    MultiplePackageError,
    NoGoError,
    PackageMetadataError,
)
from gopherlint.ingest.constraints import (
    UNIX_OS,
    ConstraintSyntaxError,
    good_os_arch_file,
    should_build,
)
from gopherlint.ingest.go_source import parse_file
from gopherlint.order_contract import sort_once

GO_RELEASE_MINOR = 22

_MODULE_RE = re.compile(r'^module\s+"?(?P<path>[^\s"]+)"?\s*$', re.MULTILINE)
_PLATFORM_OS = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "netbsd": "netbsd",
    "aix": "aix",
    "sunos": "solaris",
}
_PLATFORM_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


@dataclass(frozen=True)
class GoPackage:
    dir: str
    name: str
    import_path: str = ""
    go_files: tuple[str, ...] = ()
    cgo_files: tuple[str, ...] = ()
    test_go_files: tuple[str, ...] = ()
    xtest_go_files: tuple[str, ...] = ()
    ignored_go_files: tuple[str, ...] = ()


def _host_goos() -> str:
    for prefix, goos in _PLATFORM_OS.items():
        if sys.platform.startswith(prefix):
            return goos
    return sys.platform


def _host_goarch() -> str:
    machine = platform.machine().lower()
    return _PLATFORM_ARCH.get(machine, machine)


def _default_gopath(environ: Mapping[str, str]) -> tuple[str, ...]:
    raw = environ.get("GOPATH", "").strip()
    if raw:
        return tuple(part for part in raw.split(os.pathsep) if part)
    return (str(Path.home() / "go"),)


@dataclass(frozen=True)
class BuildContext:
    goos: str
    goarch: str
    goroot: str = ""
    gopath: tuple[str, ...] = ()
    build_tags: tuple[str, ...] = ()
    cgo_enabled: bool = False
    release_minor: int = GO_RELEASE_MINOR

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        tags: tuple[str, ...] | list[str] = (),
    ) -> "BuildContext":
        env = os.environ if environ is None else environ
        cgo_raw = env.get("CGO_ENABLED", "").strip()
        return cls(
            goos=env.get("GOOS", "").strip() or _host_goos(),
            goarch=env.get("GOARCH", "").strip() or _host_goarch(),
            goroot=env.get("GOROOT", "").strip(),
            gopath=_default_gopath(env),
            build_tags=tuple(tags),
            cgo_enabled=cgo_raw == "1",
        )

    def match_tag(self, tag: str) -> bool:
        if tag == "ignore":
            return False
        if tag in {self.goos, self.goarch, "gc"}:
            return True
        if tag == "unix" and self.goos in UNIX_OS:
            return True
        if tag == "cgo":
            return self.cgo_enabled
        if self.goos == "android" and tag == "linux":
            return True
        if self.goos == "illumos" and tag == "solaris":
            return True
        if self.goos == "ios" and tag == "darwin":
            return True
        if tag.startswith("go1."):
            minor = tag[len("go1."):]
            return minor.isdigit() and 1 <= int(minor) <= self.release_minor
        return tag in self.build_tags

    def import_dir(self, dirname: str | Path) -> GoPackage:
        """Read the Go package in ``dirname`` and partition its files."""
        path = Path(dirname)
        if not path.is_dir():
            raise PackageMetadataError(f'cannot find package "." in:\n\t{dirname}', dirname=dirname)
        try:
            entries = sort_once(os.listdir(path), source="import_dir.entries")
        except OSError as exc:
            raise PackageMetadataError(f"{dirname}: {exc}", dirname=dirname) from exc

        pkg_name = ""
        first_file = ""
        files: dict[str, list[str]] = {
            "go": [], "cgo": [], "test": [], "xtest": [], "ignored": [],
        }
        for name in entries:
            if not name.endswith(".go") or not (path / name).is_file():
                continue
            if name.startswith(("_", ".")) or not good_os_arch_file(
                name, goos=self.goos, goarch=self.goarch
            ):
                files["ignored"].append(name)
                continue
            try:
                data = (path / name).read_bytes()
            except OSError as exc:
                raise PackageMetadataError(f"{path / name}: {exc}", dirname=dirname) from exc
            gofile = parse_file(path / name, data)
            if not gofile.package_name:
                detail = gofile.errors[0].message if gofile.errors else "missing package clause"
                raise PackageMetadataError(f"{path / name}: {detail}", dirname=dirname)
            try:
                buildable = should_build(
                    (comment.text for comment in gofile.header_comments()),
                    self.match_tag,
                )
            except ConstraintSyntaxError as exc:
                raise PackageMetadataError(f"{path / name}: {exc}", dirname=dirname) from exc
            if not buildable:
                files["ignored"].append(name)
                continue

            declared = gofile.package_name
            is_test = name.endswith("_test.go")
            is_xtest = is_test and declared.endswith("_test")
            if is_xtest:
                declared = declared[: -len("_test")]
            if not pkg_name:
                pkg_name, first_file = declared, name
            elif declared != pkg_name:
                raise MultiplePackageError(
                    dirname,
                    packages=(pkg_name, declared),
                    files=(first_file, name),
                )

            if is_xtest:
                files["xtest"].append(name)
            elif is_test:
                files["test"].append(name)
            elif any(imp.path == "C" for imp in gofile.imports):
                files["cgo" if self.cgo_enabled else "ignored"].append(name)
            else:
                files["go"].append(name)

        if not (files["go"] or files["cgo"] or files["test"] or files["xtest"]):
            raise NoGoError(dirname)
        return GoPackage(
            dir=str(dirname),
            name=pkg_name,
            go_files=tuple(files["go"]),
            cgo_files=tuple(files["cgo"]),
            test_go_files=tuple(files["test"]),
            xtest_go_files=tuple(files["xtest"]),
            ignored_go_files=tuple(files["ignored"]),
        )

    def import_path(self, import_path: str, *, src_dir: str | Path) -> GoPackage:
        """Resolve ``import_path`` with the module, GOROOT, GOPATH search order."""
        if import_path.startswith(("./", "../")) or os.path.isabs(import_path):
            candidate = Path(src_dir) / import_path
            if candidate.is_dir():
                return replace(self.import_dir(candidate), import_path=import_path)
            raise ImportResolutionError(import_path, searched=(str(candidate),))

        candidates: list[tuple[Path, str]] = []
        module = find_module(src_dir)
        if module is not None:
            module_path, module_root = module
            if import_path == module_path or import_path.startswith(module_path + "/"):
                rest = import_path[len(module_path):].lstrip("/")
                candidates.append((module_root / rest if rest else module_root, "(from go.mod)"))
        if self.goroot:
            candidates.append((Path(self.goroot) / "src" / import_path, "(from $GOROOT)"))
        for entry in self.gopath:
            candidates.append((Path(entry) / "src" / import_path, "(from $GOPATH)"))

        for candidate, _origin in candidates:
            if candidate.is_dir():
                return replace(self.import_dir(candidate), import_path=import_path)
        raise ImportResolutionError(
            import_path,
            searched=tuple(f"{candidate} {origin}" for candidate, origin in candidates),
        )


def find_module(start: str | Path) -> tuple[str, Path] | None:
    """Return (module path, module root) of the go.mod enclosing ``start``."""
    current = Path(start).resolve()
    for directory in (current, *current.parents):
        gomod = directory / "go.mod"
        if not gomod.is_file():
            continue
        try:
            text = gomod.read_text(encoding="utf-8")
        except OSError:
            return None
        match = _MODULE_RE.search(text)
        if match is None:
            return None
        return match.group("path"), directory
    return None
