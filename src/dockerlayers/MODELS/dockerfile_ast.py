"""
Models for the Dockerfile Abstract Syntax Tree.
"""
from pydantic import BaseModel, ConfigDict


class RawInstruction(BaseModel):
    """
    A logical Dockerfile line, after comments are stripped and
    backslash continuations are joined.
    """
    model_config = ConfigDict(frozen=True)

    line: int
    text: str


class ParsedInstruction(BaseModel):
    """
    Represents a single instruction in a Dockerfile.

    ``keyword`` is the upper-cased directive, ``args`` the trimmed remainder
    and ``raw`` the logical line as written, kept for display.
    """
    model_config = ConfigDict(frozen=True)

    line: int
    keyword: str
    args: str = ""
    raw: str = ""
