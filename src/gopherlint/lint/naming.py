from __future__ import annotations

import re

COMMON_INITIALISMS = frozenset(
    {
        "ACL", "API", "ASCII", "CPU", "CSS", "DNS", "EOF", "GUID", "HTML",
        "HTTP", "HTTPS", "ID", "IP", "JSON", "LHS", "QPS", "RAM", "RHS", "RPC",
        "SLA", "SMTP", "SQL", "SSH", "TCP", "TLS", "TTL", "UDP", "UI", "UID",
        "UUID", "URI", "URL", "UTF8", "VM", "XML", "XMPP", "XSRF", "XSS",
    }
)

ALL_CAPS_RE = re.compile(r"^[A-Z0-9_]+$")


def lint_name(name: str) -> str:
    """Return the idiomatic spelling of ``name``.

    Underscores are dropped (one is kept between two digits), words are split
    at lower-to-upper transitions, and common initialisms are upper-cased.
    """
    if name == "_" or all(ch.islower() for ch in name):
        return name
    runes = list(name)
    start = 0
    i = 0
    while i + 1 <= len(runes):
        end_of_word = False
        if i + 1 == len(runes):
            end_of_word = True
        elif runes[i + 1] == "_":
            end_of_word = True
            n = 1
            while i + n + 1 < len(runes) and runes[i + n + 1] == "_":
                n += 1
            if i + n + 1 < len(runes) and runes[i].isdigit() and runes[i + n + 1].isdigit():
                n -= 1
            del runes[i + 1 : i + n + 1]
        elif runes[i].islower() and not runes[i + 1].islower():
            end_of_word = True
        i += 1
        if not end_of_word:
            continue
        word = "".join(runes[start:i])
        upper = word.upper()
        if upper in COMMON_INITIALISMS:
            if start == 0 and runes[start].islower():
                upper = upper.lower()
            runes[start:i] = list(upper)
        elif start > 0 and word.lower() == word:
            runes[start] = runes[start].upper()
        start = i
    return "".join(runes)


def is_all_caps(name: str) -> bool:
    return len(name) >= 5 and "_" in name and ALL_CAPS_RE.match(name) is not None
