from __future__ import annotations

import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from scoutcli.logging_decorators import log_call
from scoutcli.main import main
from scoutcli.models import ModelRegistry


class ModelRegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "models.json"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, data) -> None:
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def test_load_and_default(self) -> None:
        self._write({
            "default_llm_model": "b",
            "llm_models": [
                {"name": "a", "provider": "openai", "endpoint": "https://api.openai.com/v1"},
                {"name": "b", "provider": "ollama", "endpoint": "http://localhost:11434/v1", "model": "qwen"},
                {"provider": "nameless"},
            ],
        })
        reg = ModelRegistry(self.path)
        self.assertEqual([m.name for m in reg.list()], ["a", "b"])
        self.assertEqual(reg.get(None).resolved_model(), "qwen")
        self.assertEqual(reg.get("a").resolved_model(), "a")
        with self.assertRaises(ValueError):
            reg.get("c")

    def test_first_model_is_default(self) -> None:
        self._write({"llm_models": [{"name": "only", "endpoint": "http://x"}]})
        self.assertEqual(ModelRegistry(self.path).get(None).name, "only")

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            ModelRegistry(self.path)

    def test_missing_model_list(self) -> None:
        self._write({"models": []})
        with self.assertRaises(ValueError):
            ModelRegistry(self.path)


class LogCallTests(unittest.TestCase):
    def test_passes_result_through(self) -> None:
        @log_call("double")
        def double(x: int) -> int:
            return x * 2

        self.assertEqual(double(4), 8)

    def test_reraises(self) -> None:
        @log_call("fail")
        def fail() -> str:
            raise ValueError("nope")

        with self.assertRaisesRegex(ValueError, "nope"):
            fail()


class MainTests(unittest.TestCase):
    def test_missing_config_exits_with_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            err = io.StringIO()
            with mock.patch("sys.stderr", err):
                code = main(["--config", str(Path(tmp) / "absent.json"), "--root", tmp])
        self.assertEqual(code, 1)
        self.assertIn("[error]", err.getvalue())


if __name__ == "__main__":
    unittest.main()
