from gopherlint.ingest.go_build import BuildContext, GoPackage, find_module
from gopherlint.ingest.go_source import Comment, CommentGroup, Decl, GoFile, Import, Token, parse_file

__all__ = [
    "BuildContext",
    "Comment",
    "CommentGroup",
    "Decl",
    "GoFile",
    "GoPackage",
    "Import",
    "Token",
    "find_module",
    "parse_file",
]
