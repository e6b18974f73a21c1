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
Entry point for analyzing a Dockerfile into a layer report.
"""
import logging
import os
from typing import List

from ..MODELS.dockerfile_ast import ParsedInstruction
from ..MODELS.layer_report import Report
from ..PARSERS.dockerfile_parser import DockerfileParser
from .report_builder import ReportBuilder

logger = logging.getLogger(__name__)


class LayerAnalyzer:
    """
    Analyzes Dockerfiles and explains how every instruction shapes the
    image layers and the build cache.
    """
    def __init__(self):
        self.parser = DockerfileParser()

    def analyze(self, dockerfile_path: str) -> Report:
        """
        Parses a Dockerfile from disk and builds its layer report.

        :param dockerfile_path: Path to the Dockerfile.
        :return: The analysis report, with an absolute ``file_path``.
        :raises OSError: If the file cannot be read.
        :raises DockerfileAnalysisError: If the Dockerfile is malformed or is not
            valid UTF-8 text (``ParseError``).
        """
        full_path = os.path.abspath(dockerfile_path)
        logger.debug("Analyzing %s", full_path)
        return self._build(full_path, self.parser.parse(full_path))

    def analyze_string(self, content: str, file_path: str = "Dockerfile") -> Report:
        """
        Builds the layer report for Dockerfile text held in memory.

        :param content: Dockerfile content.
        :param file_path: Name recorded in the report.
        :return: The analysis report.
        """
        return self._build(file_path, self.parser.parse_from_string(content))

    def _build(self, file_path: str, instructions: List[ParsedInstruction]) -> Report:
        return ReportBuilder(file_path).build(instructions)
