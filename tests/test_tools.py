from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from scoutcli.tools.registry import ToolDefinition, ToolError, ToolRegistry, make_executor

_SCHEMA = {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["a"]}


def _upper(a: str) -> str:
    return a.upper()


class ToolRegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _tool(self, name: str = "upper") -> ToolDefinition:
        return ToolDefinition(name, "Upper-case text", _SCHEMA, make_executor(name, _upper, _SCHEMA))

    def test_builtin_tools_are_registered_in_order(self) -> None:
        reg = ToolRegistry(self.root)
        self.assertEqual(list(reg.tools), ["list_files", "read_file", "bash", "edit_file", "grep", "search", "tree"])
        for decl in reg.declarations():
            self.assertEqual(set(decl), {"name", "description", "input_schema"})
            self.assertEqual(decl["input_schema"]["type"], "object")

    def test_registry_is_frozen_after_startup(self) -> None:
        reg = ToolRegistry(self.root, builtins=False)
        with self.assertRaises(RuntimeError):
            reg.add(self._tool())

    def test_duplicate_names_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ToolRegistry(self.root, builtins=False, extra_tools=[self._tool(), self._tool()])

    def test_call_unknown_tool(self) -> None:
        reg = ToolRegistry(self.root, builtins=False)
        self.assertIsNone(reg.get("nope"))
        with self.assertRaises(KeyError):
            reg.call("nope", {})

    def test_missing_required_argument(self) -> None:
        reg = ToolRegistry(self.root, builtins=False, extra_tools=[self._tool()])
        with self.assertRaises(ToolError):
            reg.call("upper", {})

    def test_unknown_arguments_are_dropped(self) -> None:
        reg = ToolRegistry(self.root, builtins=False, extra_tools=[self._tool()])
        self.assertEqual(reg.call("upper", {"a": "hi", "extra": 1}), "HI")

    def test_openai_schemas(self) -> None:
        reg = ToolRegistry(self.root, builtins=False, extra_tools=[self._tool()])
        (schema,) = reg.schemas_openai()
        self.assertEqual(schema["type"], "function")
        self.assertEqual(schema["function"]["name"], "upper")
        self.assertEqual(schema["function"]["parameters"], _SCHEMA)


class BuiltinToolTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.reg = ToolRegistry(self.root)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    # ---------- list_files / read_file ----------

    def test_list_files_skips_vcs_and_dependencies(self) -> None:
        (self.root / "src").mkdir()
        (self.root / "src" / "app.py").write_text("x", encoding="utf-8")
        (self.root / "README.md").write_text("x", encoding="utf-8")
        (self.root / ".git").mkdir()
        (self.root / ".git" / "HEAD").write_text("x", encoding="utf-8")
        (self.root / "node_modules" / "pkg").mkdir(parents=True)
        (self.root / "node_modules" / "pkg" / "index.js").write_text("x", encoding="utf-8")

        out = self.reg.call("list_files", {"path": "."})
        self.assertEqual(out.splitlines(), ["README.md", str(Path("src") / "app.py")])

    def test_read_file(self) -> None:
        (self.root / "notes.txt").write_text("line one\nline two\n", encoding="utf-8")
        self.assertEqual(self.reg.call("read_file", {"path": "notes.txt"}), "line one\nline two\n")

    def test_read_missing_file(self) -> None:
        with self.assertRaises(ToolError):
            self.reg.call("read_file", {"path": "absent.txt"})

    # ---------- bash ----------

    def test_bash_success(self) -> None:
        self.assertEqual(self.reg.call("bash", {"command": "echo hello"}), "hello")

    def test_bash_runs_in_project_root(self) -> None:
        (self.root / "marker.txt").write_text("x", encoding="utf-8")
        self.assertIn("marker.txt", self.reg.call("bash", {"command": "ls"}))

    def test_bash_failure_is_reported_as_text(self) -> None:
        out = self.reg.call("bash", {"command": "echo oops; exit 3"})
        self.assertTrue(out.startswith("Command failed with error: exit status 3"))
        self.assertIn("oops", out)

    # ---------- edit_file ----------

    def _edit(self, **kwargs) -> str:
        return self.reg.call("edit_file", kwargs)

    def test_edit_creates_missing_file(self) -> None:
        out = self._edit(file_path="pkg/new.txt", old_string="", new_string="hello")
        self.assertEqual(out, "Successfully created file pkg/new.txt")
        self.assertEqual((self.root / "pkg" / "new.txt").read_text(encoding="utf-8"), "hello")

    def test_edit_missing_file_with_old_string(self) -> None:
        with self.assertRaisesRegex(ToolError, "File not found"):
            self._edit(file_path="absent.txt", old_string="a", new_string="b")

    def test_edit_rejects_identical_strings(self) -> None:
        with self.assertRaisesRegex(ToolError, "Invalid input parameters"):
            self._edit(file_path="f.txt", old_string="same", new_string="same")

    def test_edit_replaces_unique_match(self) -> None:
        p = self.root / "f.txt"
        p.write_text("alpha beta gamma", encoding="utf-8")
        self.assertEqual(self._edit(file_path="f.txt", old_string="beta", new_string="BETA"), "OK")
        self.assertEqual(p.read_text(encoding="utf-8"), "alpha BETA gamma")

    def test_edit_requires_unique_match(self) -> None:
        p = self.root / "f.txt"
        p.write_text("x x x", encoding="utf-8")
        with self.assertRaisesRegex(ToolError, "found 3 times"):
            self._edit(file_path="f.txt", old_string="x", new_string="y")
        self.assertEqual(p.read_text(encoding="utf-8"), "x x x")

    def test_edit_no_match(self) -> None:
        (self.root / "f.txt").write_text("abc", encoding="utf-8")
        with self.assertRaisesRegex(ToolError, "not found in file"):
            self._edit(file_path="f.txt", old_string="zzz", new_string="y")

    def test_edit_replace_all(self) -> None:
        p = self.root / "f.txt"
        p.write_text("x x x", encoding="utf-8")
        self._edit(file_path="f.txt", old_string="x", new_string="y", replace_all=True)
        self.assertEqual(p.read_text(encoding="utf-8"), "y y y")

    def test_edit_empty_old_string_appends(self) -> None:
        p = self.root / "f.txt"
        p.write_text("start", encoding="utf-8")
        self._edit(file_path="f.txt", old_string="", new_string="-end")
        self.assertEqual(p.read_text(encoding="utf-8"), "start-end")


if __name__ == "__main__":
    unittest.main()
