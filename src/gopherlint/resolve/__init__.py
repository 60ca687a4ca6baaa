from gopherlint.resolve.classify import (
    CurrentDir,
    Directory,
    FileList,
    ImportRef,
    Target,
    WildcardTree,
    classify_args,
)
from gopherlint.resolve.tree import DirExcluder, iter_package_dirs
from gopherlint.resolve.units import add_dir, add_files, add_import

__all__ = [
    "CurrentDir",
    "DirExcluder",
    "Directory",
    "FileList",
    "ImportRef",
    "Target",
    "WildcardTree",
    "add_dir",
    "add_files",
    "add_import",
    "classify_args",
    "iter_package_dirs",
]
