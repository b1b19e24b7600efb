# ripgrep/tree.py
"""
Breadth-limited directory tree.

The full file list is loaded into a trie kept in a flat arena (nodes refer to
children by index). A copy of it is then built level by level, taking the
children of every node on a level round-robin, until `limit` nodes have been
admitted. Nodes that lost children to the budget get a "[N truncated]" entry.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from ..config_home import TOOL_CONFIG_DIRNAME
from .files import iter_files
from .provision import RipgrepProvisioner

DEFAULT_LIMIT = 50
ROOT = 0

_SEP = re.compile(r"[\\/]") if os.sep == "\\" else re.compile(r"/")


@dataclass
class TreeNode:
    segments: Tuple[str, ...]
    children: List[int] = field(default_factory=list)
    by_name: Dict[str, int] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.segments[-1] if self.segments else ""


class Trie:
    """Path-segment trie in an index-addressed arena; node 0 is the root."""

    def __init__(self):
        self.nodes: List[TreeNode] = [TreeNode(segments=())]

    def node(self, idx: int) -> TreeNode:
        return self.nodes[idx]

    def add_child(self, parent: int, name: str) -> int:
        p = self.nodes[parent]
        idx = len(self.nodes)
        self.nodes.append(TreeNode(segments=p.segments + (name,)))
        p.children.append(idx)
        p.by_name[name] = idx
        return idx

    def find(self, segments: Iterable[str], create: bool = False) -> Optional[int]:
        cur = ROOT
        for seg in segments:
            nxt = self.nodes[cur].by_name.get(seg)
            if nxt is None:
                if not create:
                    return None
                nxt = self.add_child(cur, seg)
            cur = nxt
        return cur

    def sort(self, idx: int = ROOT) -> None:
        """Leaves before subtrees, then by name; applied to every level."""
        stack = [idx]
        while stack:
            node = self.nodes[stack.pop()]
            node.children.sort(key=lambda c: (bool(self.nodes[c].children), self.nodes[c].name))
            stack.extend(node.children)

    def render(self) -> str:
        lines: List[str] = []

        def walk(idx: int, depth: int) -> None:
            node = self.nodes[idx]
            lines.append("\t" * depth + node.name + ("/" if node.children else ""))
            for c in node.children:
                walk(c, depth + 1)

        for c in self.nodes[ROOT].children:
            walk(c, 0)
        return "\n".join(lines)


def build_trie(files: Iterable[str]) -> Trie:
    trie = Trie()
    for f in files:
        parts = [p for p in _SEP.split(f) if p]
        if not parts or TOOL_CONFIG_DIRNAME in parts:
            continue
        trie.find(parts, create=True)
    trie.sort()
    return trie


def limit_trie(source: Trie, limit: int = DEFAULT_LIMIT) -> Trie:
    """
    Copy at most `limit` nodes of `source`, breadth first, round-robin across
    the siblings of each level.
    """
    result = Trie()
    processed = 0
    current = [ROOT]
    while current:
        nxt = [c for idx in current for c in source.node(idx).children]
        widest = max(len(source.node(idx).children) for idx in current)
        for i in range(widest):
            if processed >= limit:
                break
            for idx in current:
                children = source.node(idx).children
                if i >= len(children):
                    continue
                result.find(source.node(children[i]).segments, create=True)
                processed += 1
                if processed >= limit:
                    break

        if processed >= limit:
            for idx in current + nxt:
                src = source.node(idx)
                copied = result.find(src.segments)
                if copied is None:
                    continue
                have = len(result.node(copied).children)
                if have != len(src.children):
                    result.add_child(copied, f"[{len(src.children) - have} truncated]")
            break
        current = nxt
    return result


def render_tree(files: Iterable[str], limit: int = DEFAULT_LIMIT) -> str:
    return limit_trie(build_trie(files), limit=limit).render()


def tree(provisioner: RipgrepProvisioner, cwd, limit: int = DEFAULT_LIMIT) -> str:
    files = list(iter_files(provisioner, cwd))
    logger.debug("tree: cwd='{}' files={} limit={}", str(cwd), len(files), limit)
    return render_tree(files, limit=limit)
