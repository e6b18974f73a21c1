"""
Reassembles physical Dockerfile lines into logical instructions.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from ..MODELS.dockerfile_ast import RawInstruction
from ..errors import ContinuationError, ParseError

logger = logging.getLogger(__name__)


class LineAssembler:
    """
    Strips comments and joins backslash-continued lines.
    Input is consumed once, front to back.
    """

    def assemble_file(self, dockerfile_path: str) -> List[RawInstruction]:
        """
        Reads a Dockerfile from disk and assembles its logical lines.

        :param dockerfile_path: Path to the Dockerfile.
        :return: Logical instructions in source order.
        :raises ParseError: If the file is not valid UTF-8 text.
        """
        try:
            with open(dockerfile_path, 'r', encoding='utf-8') as f:
                return self.assemble(f)
        except UnicodeDecodeError:
            raise ParseError(f"{dockerfile_path} is not valid UTF-8 text") from None

    def assemble(self, lines: Iterable[str]) -> List[RawInstruction]:
        """
        Assembles logical instructions from physical lines.

        :param lines: Physical lines in order, with or without line endings.
        :return: Logical instructions, each tagged with its first physical line.
        :raises ContinuationError: If the input ends inside a continuation.
        """
        instructions = []
        parts: List[str] = []
        start_line: Optional[int] = None

        for number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            line = strip_inline_comment(line)
            if not line:
                continue

            if start_line is None:
                start_line = number
            content, carries = strip_continuation(line)
            if content:
                parts.append(content)

            if not carries:
                instructions.append(RawInstruction(line=start_line, text=" ".join(parts)))
                parts = []
                start_line = None

        if start_line is not None:
            raise ContinuationError(line=start_line)

        logger.debug("Assembled %d logical instructions", len(instructions))
        return instructions


def strip_inline_comment(line: str) -> str:
    """
    Removes a trailing comment from an already trimmed line.

    A ``#`` only opens a comment at the start of the line or right after
    whitespace, so URLs like ``http://host/page#anchor`` are left alone.
    """
    for i, char in enumerate(line):
        if char == '#' and (i == 0 or line[i - 1].isspace()):
            return line[:i].strip()
    return line


def strip_continuation(line: str) -> Tuple[str, bool]:
    """
    Splits off a trailing backslash.

    :return: The line content and whether the next line continues it.
    """
    if line.endswith('\\'):
        return line[:-1].strip(), True
    return line, False
