# main.py
import argparse
import os
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
from loguru import logger

from .adapters import OpenAICompatAdapter
from .agent import Agent
from .config_home import ENV_PATH, ensure_dirs, ensure_models_template
from .console import Console
from .logging_setup import configure_logging
from .models import ModelRegistry
from .tools.registry import ToolRegistry


def _load_env(env_file: Optional[str]) -> None:
    """Explicit --env-file wins; else the nearest .env from cwd; else the app-level one."""
    if env_file:
        load_dotenv(env_file, override=False)
        return
    found = find_dotenv(usecwd=True)
    if found:
        load_dotenv(found, override=False)
    elif ENV_PATH.exists():
        load_dotenv(ENV_PATH, override=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scoutcli",
        description="scoutcli - interactive coding assistant that can read, search and edit a local project",
    )
    parser.add_argument("-c", "--config", help="Path to model config JSON (default: ~/.scoutcli/models.json)")
    parser.add_argument("-m", "--model", help="Model name to use (optional; defaults from config)")
    parser.add_argument("-r", "--root", default=os.getcwd(), help="Project root directory (default: cwd)")
    parser.add_argument("--env-file", help="Load API keys from this .env file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Also log to stderr")
    parser.add_argument("--log-level", help="Log level (env fallback: SCOUTCLI_LOG_LEVEL)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    _load_env(args.env_file)
    ensure_dirs()
    configure_logging(args.log_level or ("DEBUG" if args.verbose else None), console=args.verbose)

    console = Console()
    try:
        config = args.config or str(ensure_models_template())
        model = ModelRegistry(config).get(args.model)
        tools = ToolRegistry(args.root)
        client = OpenAICompatAdapter(model, tools)
    except Exception as e:
        logger.exception("Startup failed: {}", e)
        console.error(str(e))
        return 1

    console.banner(f"Model: {model.name} ({model.provider}) | Root: {tools.root}")
    console.banner(f"Tools: {', '.join(tools.tools)}")
    console.banner("Chat with the assistant (Ctrl+D to exit)")

    agent = Agent(client, tools, console=console)
    ok = agent.run()
    if ok:
        console.goodbye()
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
