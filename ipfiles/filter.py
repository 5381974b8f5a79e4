"""File filtering with .gitignore-style rules."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from ipfiles.hidden import is_hidden

_MAGIC_STAR = "#$~"
_ESCAPED_LEAD = re.compile(r"^(#|!)")
_NESTED_GLOB = re.compile(r"([^/+])/.*\*\.")


def _pattern_from_line(line: str) -> tuple[re.Pattern[str] | None, bool]:
    line = line.rstrip("\r")
    if line.startswith("#"):
        return None, False
    line = line.strip(" ")
    if not line:
        return None, False

    negate = False
    if line[0] == "!":
        negate = True
        line = line[1:]

    if _ESCAPED_LEAD.search(line):
        line = line[1:]

    if _NESTED_GLOB.search(line) and not line.startswith("/"):
        line = "/" + line

    line = line.replace(".", r"\.")

    if line.startswith("/**/"):
        line = line[1:]
    line = line.replace("/**/", "(/|/.+/)")
    line = line.replace("**/", "(|." + _MAGIC_STAR + "/)")
    line = line.replace("/**", "(|/." + _MAGIC_STAR + ")")

    line = line.replace("\\*", "\\" + _MAGIC_STAR)
    line = line.replace("*", "([^/]*)")
    line = line.replace("?", r"\?")
    line = line.replace(_MAGIC_STAR, "*")

    expr = line + ("(|.*)$" if line.endswith("/") else "(|/.*)$")
    if expr.startswith("/"):
        expr = "^(|/)" + expr[1:]
    else:
        expr = "^(|.*/)" + expr

    try:
        return re.compile(expr), negate
    except re.error:
        return None, negate


@dataclass
class GitIgnore:
    """A compiled set of .gitignore patterns."""

    patterns: list[tuple[re.Pattern[str], bool]] = field(default_factory=list)

    def matches_path(self, path: str) -> bool:
        """Return True if ``path`` is ignored by the patterns."""
        path = path.replace(os.sep, "/")
        matched = False
        for pattern, negate in self.patterns:
            if pattern.search(path):
                if not negate:
                    matched = True
                elif matched:
                    matched = False
        return matched


def compile_ignore_lines(lines: Iterable[str] | None) -> GitIgnore:
    """Compile .gitignore-style pattern lines."""
    patterns = []
    for line in lines or ():
        pattern, negate = _pattern_from_line(line)
        if pattern is not None:
            patterns.append((pattern, negate))
    return GitIgnore(patterns)


def compile_ignore_file_and_lines(
    path: str | os.PathLike[str], lines: Iterable[str] | None
) -> GitIgnore:
    """Compile the patterns of an ignore file followed by extra lines."""
    with open(path, encoding="utf-8") as handle:
        file_lines = handle.read().split("\n")
    return compile_ignore_lines([*file_lines, *(lines or ())])


@dataclass
class Filter:
    """Rules deciding whether a file is left out."""

    include_hidden: bool
    rules: GitIgnore

    def should_exclude(self, path: str | os.PathLike[str]) -> bool:
        """Return True if the file at ``path`` should be left out."""
        path = os.fspath(path)
        if not self.include_hidden and is_hidden(path):
            return True
        return self.rules.matches_path(os.path.basename(path))


def new_filter(
    ignore_file: str | os.PathLike[str] | None,
    rules: Iterable[str] | None,
    include_hidden: bool,
) -> Filter:
    """Create a filter from an optional ignore file and a list of rules."""
    if not ignore_file:
        compiled = compile_ignore_lines(rules)
    else:
        compiled = compile_ignore_file_and_lines(ignore_file, rules)
    return Filter(include_hidden=include_hidden, rules=compiled)