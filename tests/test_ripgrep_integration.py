from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from pathlib import Path

from scoutcli.ripgrep import RipgrepProvisioner, iter_files, search
from scoutcli.tools.registry import ToolRegistry

from .fakes import piped_stdin


@unittest.skipUnless(shutil.which("rg"), "ripgrep not installed")
class RealRipgrepTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        (self.root / "src").mkdir()
        (self.root / "src" / "app.py").write_text("def main():\n    return 1\n", encoding="utf-8")
        (self.root / ".hidden.cfg").write_text("main = yes\n", encoding="utf-8")
        (self.root / ".git").mkdir()
        (self.root / ".git" / "config").write_text("main\n", encoding="utf-8")
        self.prov = RipgrepProvisioner(self.root / "bin")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_files_include_hidden_but_not_git(self) -> None:
        files = sorted(Path(f).as_posix() for f in iter_files(self.prov, self.root))
        self.assertEqual(files, [".hidden.cfg", "src/app.py"])

    def test_json_search(self) -> None:
        matches = search(self.prov, self.root, r"def \w+")
        self.assertEqual([(m.path.text, m.line_number) for m in matches], [(str(Path("src") / "app.py"), 1)])

    def test_json_search_without_matches(self) -> None:
        self.assertEqual(search(self.prov, self.root, "zzz_not_here"), [])

    def test_json_search_ignores_piped_stdin(self) -> None:
        with piped_stdin(b"next user line mentions main too\n"):
            matches = search(self.prov, self.root, r"def \w+")
        self.assertEqual([m.path.text for m in matches], [str(Path("src") / "app.py")])

    def test_tools_end_to_end(self) -> None:
        reg = ToolRegistry(self.root, provisioner=self.prov)
        grep_out = reg.call("grep", {"pattern": "main"})
        self.assertTrue(grep_out.startswith("Found 1 matches"))
        self.assertIn("Line 1: def main():", grep_out)

        found = json.loads(reg.call("search", {"pattern": "return", "include": ["*.py"]}))
        self.assertEqual(found[0]["text"], "    return 1")
        self.assertEqual(reg.call("search", {"pattern": "zzz_not_here"}), "No matches found.")

        self.assertEqual(reg.call("tree", {}), ".hidden.cfg\nsrc/\n\tapp.py")


if __name__ == "__main__":
    unittest.main()
