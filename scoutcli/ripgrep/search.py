# ripgrep/search.py
from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from loguru import logger

from .files import EXCLUDE_GIT_GLOB
from .lines import split_lines
from .protocol import Match, MatchData, parse_message
from .provision import RipgrepProvisioner

LINE_SEARCH_LIMIT = 100
MAX_LINE_LENGTH = 2000
FIELD_SEPARATOR = "|"
NO_MATCHES = "No matches found."


class SearchError(RuntimeError):
    pass


# ---------------- JSON search ----------------

def build_search_args(
    rg_path: str,
    pattern: str,
    glob: Optional[Iterable[str]] = None,
    limit: Optional[int] = None,
) -> List[str]:
    args = [rg_path, "--json", "--hidden", EXCLUDE_GIT_GLOB]
    for g in glob or ():
        args.append(f"--glob={g}")
    if limit:
        args.append(f"--max-count={limit}")
    args.append("--")
    args.append(pattern)
    return args


def parse_search_output(data: bytes) -> List[MatchData]:
    """Parse `rg --json` stdout, keeping only match payloads."""
    out: List[MatchData] = []
    for line in split_lines(data):
        msg = parse_message(line)
        if isinstance(msg, Match):
            out.append(msg.data)
    return out


def search(
    provisioner: RipgrepProvisioner,
    cwd,
    pattern: str,
    glob: Optional[Iterable[str]] = None,
    limit: Optional[int] = None,
) -> List[MatchData]:
    """
    Run a regex search under `cwd` and return ripgrep's match records.

    Exit 1 is ripgrep's "no matches" and yields []. Exit 2 with matches in
    stdout (some files could not be read) returns those matches and logs
    stderr; exit 2 without any match raises SearchError. An unrecognized
    output line raises ProtocolError.
    """
    args = build_search_args(provisioner.resolve(), pattern, glob=glob, limit=limit)
    logger.debug("search: cwd='{}' args={}", str(cwd), args[1:])
    # rg searches stdin instead of cwd when stdin is a pipe
    proc = subprocess.run(
        args, cwd=str(cwd), stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=subprocess.PIPE
    )
    if proc.returncode == 1:
        logger.debug("search: pattern='{}' → no matches", pattern)
        return []

    matches = parse_search_output(proc.stdout)
    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        if not matches:
            raise SearchError(f"ripgrep failed (exit {proc.returncode}): {stderr}")
        logger.warning("search: exit={} with {} match(es); stderr: {}", proc.returncode, len(matches), stderr)
    logger.info("search: pattern='{}' matches={}", pattern, len(matches))
    return matches


# ---------------- line search ----------------

@dataclass(frozen=True)
class SearchMatch:
    path: str
    line_number: int
    line_text: str
    mod_time: float


@dataclass
class LineSearchResult:
    matches: List[SearchMatch] = field(default_factory=list)
    truncated: bool = False
    total: int = 0


def build_line_search_args(rg_path: str, pattern: str, path: str, include: Optional[str] = None) -> List[str]:
    args = [rg_path, "-nH", f"--field-match-separator={FIELD_SEPARATOR}", "--regexp", pattern]
    if include:
        args.extend(["--glob", include])
    args.append(path)
    return args


def parse_line_records(lines: Iterable[str]) -> List[SearchMatch]:
    """
    Turn 'path|line|text' records into SearchMatch entries stamped with the
    file's mtime. Malformed records and files that no longer stat are skipped.
    """
    out: List[SearchMatch] = []
    for line in lines:
        parts = line.split(FIELD_SEPARATOR, 2)
        if len(parts) < 3 or not parts[0] or not parts[1]:
            continue
        file_path, line_num, text = parts
        try:
            line_number = int(line_num)
        except ValueError:
            continue
        try:
            mtime = os.stat(file_path).st_mtime
        except OSError:
            continue
        out.append(SearchMatch(path=file_path, line_number=line_number, line_text=text, mod_time=mtime))
    return out


def sort_matches(matches: List[SearchMatch]) -> List[SearchMatch]:
    """Newest file first; ties broken by path, then line number."""
    return sorted(matches, key=lambda m: (-m.mod_time, m.path, m.line_number))


def line_search(
    provisioner: RipgrepProvisioner,
    pattern: str,
    path,
    include: Optional[str] = None,
    limit: int = LINE_SEARCH_LIMIT,
) -> LineSearchResult:
    args = build_line_search_args(provisioner.resolve(), pattern, str(path), include=include)
    logger.debug("line_search: args={}", args[1:])
    proc = subprocess.run(args, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    if proc.returncode == 1:
        return LineSearchResult()
    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        raise SearchError(f"ripgrep failed: {stderr}")

    matches = sort_matches(parse_line_records(split_lines(proc.stdout)))
    truncated = len(matches) > limit
    logger.info("line_search: pattern='{}' path='{}' matches={} truncated={}", pattern, str(path), len(matches), truncated)
    return LineSearchResult(matches=matches[:limit], truncated=truncated, total=len(matches))


def render_line_matches(result: LineSearchResult) -> str:
    if not result.matches:
        return NO_MATCHES

    header = f"Found {len(result.matches)} matches" + (" (truncated)" if result.truncated else "")
    out = [header]
    current = None
    for m in result.matches:
        if m.path != current:
            if current is not None:
                out.append("")
            current = m.path
            out.append(f"{m.path}:")
        text = m.line_text
        if len(text) > MAX_LINE_LENGTH:
            text = text[:MAX_LINE_LENGTH] + "..."
        out.append(f"  Line {m.line_number}: {text}")

    if result.truncated:
        out.append("")
        out.append("(Results are truncated. Consider using a more specific path or pattern.)")
    return "\n".join(out)


def match_to_dict(m: MatchData) -> dict:
    return {
        "path": m.path.text,
        "line_number": m.line_number,
        "text": m.lines.text.rstrip("\r\n"),
        "absolute_offset": m.absolute_offset,
        "submatches": [{"text": s.match.text, "start": s.start, "end": s.end} for s in m.submatches],
    }
