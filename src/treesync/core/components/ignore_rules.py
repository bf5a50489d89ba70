from __future__ import annotations

"""
Path Ignore Rules.

Implements glob-based predicates that exclude paths from the snapshot walk.
Globs are evaluated against the path relative to the rule's base directory,
using POSIX separators so that project files behave the same on every
platform.
"""

import fnmatch
import os
import posixpath
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

# -----------------------------------------------------------------------------
# RULE MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PathIgnoreRule:
    """
    Excludes every path below `base_path` whose relative form matches `glob`.

    Attributes:
        glob: Shell-style pattern (fnmatch syntax, '**/' may match nothing).
        base_path: Directory the glob is anchored to.
    """
    glob: str
    base_path: str

    def passes(self, path: str) -> bool:
        """
        Decide whether a path survives this rule.

        Args:
            path: Filesystem path under evaluation.

        Returns:
            bool: False only if the path is under `base_path` and matches.
        """
        relative = _relative_to(path, self.base_path)
        if relative is None:
            return True
        return not matches_glob(relative, self.glob)

# -----------------------------------------------------------------------------
# PUBLIC HELPERS
# -----------------------------------------------------------------------------

def matches_glob(relative_path: str, glob: str) -> bool:
    """
    Match a POSIX relative path against a glob.

    Every '**/' segment may also match zero directories, so '**/*.spec.lua'
    matches files directly in the base and 'src/**/x.lua' matches 'src/x.lua'.

    Args:
        relative_path: Path relative to the rule base, '/'-separated.
        glob: Pattern to evaluate.

    Returns:
        bool: True if the pattern matches.
    """
    return any(fnmatch.fnmatchcase(relative_path, g) for g in _glob_variants(glob))


def rules_from_globs(globs: Iterable[str], base_path: str) -> List[PathIgnoreRule]:
    """
    Build one rule per non-empty glob, all anchored at the same base.

    Args:
        globs: Raw glob patterns (typically from project settings).
        base_path: Directory the globs are relative to.

    Returns:
        List[PathIgnoreRule]: Rules in input order.
    """
    return [
        PathIgnoreRule(glob=g.strip(), base_path=base_path)
        for g in globs
        if g and g.strip()
    ]

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _glob_variants(glob: str) -> Set[str]:
    """Expand a glob into every form obtained by dropping '**/' segments."""
    variants = {glob}
    pending = [glob]
    while pending:
        current = pending.pop()
        start = current.find("**/")
        while start != -1:
            candidate = current[:start] + current[start + 3:]
            if candidate not in variants:
                variants.add(candidate)
                pending.append(candidate)
            start = current.find("**/", start + 1)
    return variants


def _relative_to(path: str, base_path: str) -> Optional[str]:
    """Compute the '/'-separated path of `path` below `base_path`, if any."""
    norm_path = posixpath.normpath(path.replace(os.sep, "/"))
    norm_base = posixpath.normpath(base_path.replace(os.sep, "/"))

    if norm_path == norm_base:
        return ""

    prefix = norm_base if norm_base.endswith("/") else norm_base + "/"
    if not norm_path.startswith(prefix):
        return None
    return norm_path[len(prefix):]
