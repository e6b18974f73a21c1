"""
Parsers for Dockerfiles, extracting instructions and arguments.
"""
import io
from typing import List

from ..MODELS.dockerfile_ast import ParsedInstruction, RawInstruction
from .line_assembler import LineAssembler


class DockerfileParser:
    """
    Parser for Dockerfile instructions.
    """
    def __init__(self):
        self.assembler = LineAssembler()

    def parse(self, dockerfile_path: str) -> List[ParsedInstruction]:
        """
        Parses a Dockerfile from a file path.

        Args:
            dockerfile_path (str): Path to the Dockerfile.

        Returns:
            List[ParsedInstruction]: List of parsed instructions.
        """
        return self._parse_raw(self.assembler.assemble_file(dockerfile_path))

    def parse_from_string(self, content: str) -> List[ParsedInstruction]:
        """
        Parses a Dockerfile from a string content.

        Args:
            content (str): Content of the Dockerfile.

        Returns:
            List[ParsedInstruction]: List of parsed instructions.
        """
        return self._parse_raw(self.assembler.assemble(io.StringIO(content, newline=None)))

    def _parse_raw(self, raw_instructions: List[RawInstruction]) -> List[ParsedInstruction]:
        return [self.parse_instruction(raw) for raw in raw_instructions]

    @staticmethod
    def parse_instruction(raw: RawInstruction) -> ParsedInstruction:
        """
        Splits a logical line into keyword and arguments.

        The keyword is everything up to the first whitespace run, upper-cased;
        the arguments are the trimmed remainder. A blank line yields an empty
        keyword.

        Args:
            raw (RawInstruction): The logical line to split.

        Returns:
            ParsedInstruction: The parsed instruction.
        """
        trimmed = raw.text.strip()
        if not trimmed:
            return ParsedInstruction(line=raw.line, keyword="")

        parts = trimmed.split(None, 1)
        args = parts[1].strip() if len(parts) > 1 else ""
        return ParsedInstruction(
            line=raw.line,
            keyword=parts[0].upper(),
            args=args,
            raw=trimmed
        )
