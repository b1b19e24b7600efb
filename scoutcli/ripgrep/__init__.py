# ripgrep/__init__.py
from .provision import (
    PLATFORMS,
    ProvisioningError,
    RipgrepProvisioner,
    UnsupportedPlatformError,
    current_platform_key,
)
from .lines import LineSplitter, iter_lines, split_lines
from .files import iter_files
from .protocol import ProtocolError, parse_message
from .search import (
    LineSearchResult,
    SearchError,
    SearchMatch,
    line_search,
    render_line_matches,
    search,
)
from .tree import render_tree, tree

__all__ = [
    "PLATFORMS",
    "ProvisioningError",
    "RipgrepProvisioner",
    "UnsupportedPlatformError",
    "current_platform_key",
    "LineSplitter",
    "iter_lines",
    "split_lines",
    "iter_files",
    "ProtocolError",
    "parse_message",
    "LineSearchResult",
    "SearchError",
    "SearchMatch",
    "line_search",
    "render_line_matches",
    "search",
    "render_tree",
    "tree",
]
