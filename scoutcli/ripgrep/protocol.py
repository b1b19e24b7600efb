# ripgrep/protocol.py
"""
Message shapes of `rg --json` output.

Every stdout line is exactly one of begin / match / end / summary. Lines are
validated field by field; a line matching none of them is a ProtocolError.
"""
from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError


class ProtocolError(ValueError):
    def __init__(self, line: str, reason: str):
        self.line = line
        super().__init__(f"Unrecognized ripgrep output line: {reason}")


class Text(BaseModel):
    text: str


class Elapsed(BaseModel):
    secs: int
    nanos: int
    human: str


class Stats(BaseModel):
    elapsed: Elapsed
    searches: int
    searches_with_match: int
    bytes_searched: int
    bytes_printed: int
    matched_lines: int
    matches: int


class SubMatch(BaseModel):
    match: Text
    start: int
    end: int


class BeginData(BaseModel):
    path: Text


class MatchData(BaseModel):
    path: Text
    lines: Text
    line_number: int
    absolute_offset: int
    submatches: List[SubMatch]


class EndData(BaseModel):
    path: Text
    binary_offset: Optional[int]
    stats: Stats


class SummaryData(BaseModel):
    elapsed_total: Elapsed
    stats: Stats


class Begin(BaseModel):
    type: Literal["begin"]
    data: BeginData


class Match(BaseModel):
    type: Literal["match"]
    data: MatchData


class End(BaseModel):
    type: Literal["end"]
    data: EndData


class Summary(BaseModel):
    type: Literal["summary"]
    data: SummaryData


ProtocolMessage = Annotated[Union[Begin, Match, End, Summary], Field(discriminator="type")]

_MESSAGE = TypeAdapter(ProtocolMessage)


def parse_message(line: str) -> Union[Begin, Match, End, Summary]:
    try:
        return _MESSAGE.validate_json(line)
    except ValidationError as e:
        errs = e.errors()
        reason = errs[0].get("msg", str(e)) if errs else str(e)
        raise ProtocolError(line, reason) from e
