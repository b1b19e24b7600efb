# tools/search_tools.py
from __future__ import annotations

import json
from typing import TYPE_CHECKING, List, Optional, Union

from loguru import logger

from ..ripgrep import line_search, render_line_matches, search, tree
from ..ripgrep.search import NO_MATCHES, match_to_dict
from ..ripgrep.tree import DEFAULT_LIMIT
from .registry import ToolError

if TYPE_CHECKING:
    from .registry import ToolRegistry


def _as_globs(include: Union[str, List[str], None]) -> Optional[List[str]]:
    if include is None or include == "":
        return None
    if isinstance(include, str):
        return [include]
    return [str(g) for g in include if str(g)]


def register_search_tools(reg: "ToolRegistry") -> None:
    # ---------- grep ----------
    def grep(pattern: str, path: Optional[str] = None, include: Optional[str] = None) -> str:
        """
        Line search: newest files first, at most 100 matches, long lines cut.
        """
        if not pattern:
            raise ToolError("pattern is required")
        target = reg.resolve(path)
        result = line_search(reg.provisioner, pattern, target, include=include or None)
        return render_line_matches(result)

    reg.register(
        "grep",
        "Fast content search using regular expressions. Returns matching lines grouped by file, "
        "most recently modified files first. Use `include` to filter files by glob (e.g. \"*.py\").",
        {
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "The regex pattern to search for in file contents"},
                "path": {
                    "type": "string",
                    "description": "The directory to search in. Defaults to the project root.",
                },
                "include": {
                    "type": "string",
                    "description": 'File pattern to include in the search (e.g. "*.js", "*.{ts,tsx}")',
                },
            },
            "required": ["pattern"],
        },
        grep,
    )

    # ---------- search ----------
    def search_files(
        pattern: str,
        path: Optional[str] = None,
        include: Union[str, List[str], None] = None,
        limit: Optional[int] = None,
    ) -> str:
        if not pattern:
            raise ToolError("pattern is required")
        if limit is not None and (not isinstance(limit, int) or limit < 1):
            raise ToolError("limit must be a positive integer")
        cwd = reg.resolve(path)
        if not cwd.is_dir():
            raise ToolError(f"Not a directory: {path}")
        matches = search(reg.provisioner, cwd, pattern, glob=_as_globs(include), limit=limit)
        if not matches:
            return NO_MATCHES
        logger.info("search: pattern='{}' → {} match(es)", pattern, len(matches))
        return json.dumps([match_to_dict(m) for m in matches], indent=2, ensure_ascii=False)

    reg.register(
        "search",
        "Regex search returning structured matches (path, line_number, text, byte offset and the "
        "matched spans) as JSON. `limit` caps matches per file.",
        {
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "The regex pattern to search for"},
                "path": {"type": "string", "description": "Directory to search in (default: project root)"},
                "include": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Glob patterns restricting which files are searched",
                },
                "limit": {"type": "integer", "description": "Maximum matches per file"},
            },
            "required": ["pattern"],
        },
        search_files,
    )

    # ---------- tree ----------
    def tree_view(path: Optional[str] = None, limit: int = DEFAULT_LIMIT) -> str:
        if not isinstance(limit, int) or limit < 1:
            raise ToolError("limit must be a positive integer")
        return tree(reg.provisioner, reg.resolve(path), limit=limit)

    reg.register(
        "tree",
        "Show a compact directory tree of at most `limit` entries (default 50). Large directories "
        "are summarized with '[N truncated]' markers.",
        {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Directory to show (default: project root)"},
                "limit": {"type": "integer", "description": "Maximum number of entries"},
            },
            "required": [],
        },
        tree_view,
    )
