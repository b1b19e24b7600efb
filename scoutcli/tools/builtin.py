# tools/builtin.py
from __future__ import annotations

import os
import subprocess
from typing import TYPE_CHECKING, List

from loguru import logger

from .registry import ToolError

if TYPE_CHECKING:
    from .registry import ToolRegistry

SKIP_DIRS = {".git", "node_modules"}


def register_builtin_tools(reg: "ToolRegistry") -> None:
    # ---------- list_files ----------
    def list_files(path: str = ".") -> str:
        """
        Recursive listing relative to `path`; .git and node_modules are pruned.
        """
        base = reg.resolve(path)
        if not base.is_dir():
            raise ToolError(f"Not a directory: {path}")
        out: List[str] = []
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
            rel_dir = os.path.relpath(dirpath, base)
            for name in filenames:
                out.append(name if rel_dir == "." else os.path.join(rel_dir, name))
        out.sort()
        logger.info("list_files: path='{}' → {}", path, len(out))
        return "\n".join(out)

    reg.register(
        "list_files",
        "List all files under a directory, recursively. Paths are relative to that directory. "
        "Skips .git and node_modules.",
        {
            "type": "object",
            "properties": {"path": {"type": "string", "description": "Path to the directory to list"}},
            "required": ["path"],
        },
        list_files,
    )

    # ---------- read_file ----------
    def read_file(path: str) -> str:
        p = reg.resolve(path)
        if not p.exists():
            raise ToolError(f"File not found: {path}")
        if p.is_dir():
            raise ToolError(f"Path is a directory, expected a file: {path}")
        text = p.read_text(encoding="utf-8")
        logger.info("read_file: '{}' chars={}", path, len(text))
        return text

    reg.register(
        "read_file",
        "Read the contents of a text file at a path relative to the project root.",
        {
            "type": "object",
            "properties": {"path": {"type": "string", "description": "Path to the file to read"}},
            "required": ["path"],
        },
        read_file,
    )

    # ---------- bash ----------
    def bash(command: str) -> str:
        """
        Run `command` through the shell in the project root. A failing command
        is reported as text so the model can read the output.
        """
        proc = subprocess.run(
            command,
            shell=True,
            cwd=str(reg.root),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
        if proc.returncode != 0:
            logger.info("bash: exit={} command='{}'", proc.returncode, command[:200])
            output = (proc.stdout or "") + (proc.stderr or "")
            return f"Command failed with error: exit status {proc.returncode}\nOutput: {output}".strip()
        return proc.stdout.strip()

    reg.register(
        "bash",
        "Execute a shell command in the project root and return its output.",
        {
            "type": "object",
            "properties": {"command": {"type": "string", "description": "Command to run"}},
            "required": ["command"],
        },
        bash,
    )

    # ---------- edit_file ----------
    def edit_file(file_path: str, old_string: str, new_string: str, replace_all: bool = False) -> str:
        if not file_path or old_string == new_string:
            raise ToolError(
                "Invalid input parameters: file_path must be specified and strings must be different."
            )

        p = reg.resolve(file_path)
        if not p.exists():
            if old_string != "":
                raise ToolError(f"File not found: {file_path}")
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(new_string, encoding="utf-8")
            logger.info("edit_file: created '{}'", file_path)
            return f"Successfully created file {file_path}"

        content = p.read_text(encoding="utf-8")
        if old_string == "":
            new_content = content + new_string
        elif replace_all:
            new_content = content.replace(old_string, new_string)
        else:
            occurrences = content.count(old_string)
            if occurrences == 0:
                raise ToolError("old_string not found in file")
            if occurrences > 1:
                raise ToolError(
                    f"old_string found {occurrences} times in file, must be unique or use replace_all"
                )
            new_content = content.replace(old_string, new_string, 1)

        p.write_text(new_content, encoding="utf-8")
        logger.info("edit_file: '{}' updated (replace_all={})", file_path, replace_all)
        return "OK"

    reg.register(
        "edit_file",
        "Make edits to a text file. Replaces old_string with new_string; old_string must match exactly "
        "and only once unless replace_all is true. An empty old_string appends to the file, or creates "
        "it when it does not exist.",
        {
            "type": "object",
            "properties": {
                "file_path": {"type": "string", "description": "Path to the file to edit"},
                "old_string": {
                    "type": "string",
                    "description": "Text to search for - must match exactly and must only have one match. "
                                   "Empty value to append.",
                },
                "new_string": {"type": "string", "description": "Text to replace old_string with"},
                "replace_all": {"type": "boolean", "description": "Whether to replace all occurrences"},
            },
            "required": ["file_path", "old_string", "new_string"],
        },
        edit_file,
    )
