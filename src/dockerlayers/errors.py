# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Errors raised while analyzing a Dockerfile.

Every error is fatal for the analysis that raised it: a malformed instruction
stream invalidates the rest of the stage model, so nothing is recovered or
partially reported.
"""
from typing import Optional


class DockerfileAnalysisError(ValueError):
    """
    Base class for all analysis failures.

    :param message: Human readable description of the problem.
    :param line: 1-based source line of the offending instruction, if known.
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        if line is not None:
            super().__init__(f"line {line}: {message}")
        else:
            super().__init__(message)


class ParseError(DockerfileAnalysisError):
    """The Dockerfile text could not be split into logical instructions."""


class ContinuationError(ParseError):
    """Input ended while a backslash line continuation was still open."""

    def __init__(self, message: str = "unterminated line continuation at end of file", line: Optional[int] = None):
        super().__init__(message, line)


class EmptyInputError(DockerfileAnalysisError):
    """The Dockerfile contains no instructions at all."""


class MissingBaseImageError(DockerfileAnalysisError):
    """A FROM instruction names no base image."""

    def __init__(self, line: Optional[int] = None):
        super().__init__("FROM instruction missing base image", line)


class InstructionBeforeFromError(DockerfileAnalysisError):
    """Something other than ARG appears before the first FROM."""

    def __init__(self, keyword: str, line: Optional[int] = None):
        self.keyword = keyword
        super().__init__(f"Dockerfile must start with FROM (found {keyword})", line)
