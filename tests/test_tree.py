from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from scoutcli.ripgrep.tree import build_trie, limit_trie, render_tree, tree

from .fakes import FakeRipgrep


class TreeTests(unittest.TestCase):
    def test_leaves_before_directories(self) -> None:
        files = ["src/util/io.py", "src/main.py", "z.txt", "a/b.txt", "README.md"]
        self.assertEqual(
            render_tree(files).split("\n"),
            ["README.md", "z.txt", "a/", "\tb.txt", "src/", "\tmain.py", "\tutil/", "\t\tio.py"],
        )

    def test_flat_directory_is_truncated(self) -> None:
        files = [f"file{i:03d}.txt" for i in range(200)]
        lines = render_tree(files, limit=50).split("\n")

        self.assertEqual(len(lines), 51)
        self.assertEqual(lines[0], "file000.txt")
        self.assertEqual(lines[49], "file049.txt")
        self.assertEqual(lines[50], "[150 truncated]")

    def test_budget_is_shared_round_robin(self) -> None:
        files = [f"a/a{i}.txt" for i in range(5)] + [f"b/b{i}.txt" for i in range(5)]
        self.assertEqual(
            render_tree(files, limit=4).split("\n"),
            ["a/", "\ta0.txt", "\t[4 truncated]", "b/", "\tb0.txt", "\t[4 truncated]"],
        )

    def test_unexpanded_directories_are_marked(self) -> None:
        files = ["x/1.txt", "y/2.txt", "z/3.txt"]
        self.assertEqual(
            render_tree(files, limit=2).split("\n"),
            ["x/", "\t[1 truncated]", "y/", "\t[1 truncated]", "[1 truncated]"],
        )

    def test_small_tree_is_complete(self) -> None:
        files = ["a/b/c/d.txt"]
        self.assertEqual(render_tree(files, limit=50).split("\n"), ["a/", "\tb/", "\t\tc/", "\t\t\td.txt"])

    def test_tool_config_directory_is_skipped(self) -> None:
        trie = build_trie(["keep.py", ".scoutcli/state.json", "pkg/.scoutcli/x", "pkg/mod.py"])
        self.assertEqual(limit_trie(trie, 50).render().split("\n"), ["keep.py", "pkg/", "\tmod.py"])

    def test_empty(self) -> None:
        self.assertEqual(render_tree([]), "")


class TreeWithRipgrepTests(unittest.TestCase):
    def test_lists_through_ripgrep(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            rg = FakeRipgrep(tmp, stdout=b"pkg/a.py\nsetup.cfg\n")
            self.assertEqual(tree(rg, Path(tmp)), "setup.cfg\npkg/\n\ta.py")


if __name__ == "__main__":
    unittest.main()
