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
Models describing the outcome of a layer analysis: stages, layers and the
effect each instruction has on the build.
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .dockerfile_ast import ParsedInstruction


class Effect(str, Enum):
    """
    What an instruction does to the image being built.
    The values double as the labels shown in reports.
    """

    STAGE_START = "stage start"
    FILESYSTEM = "filesystem layer"
    METADATA = "metadata"
    BUILD_ARG = "build arg"


class Descriptor(BaseModel):
    """
    Static description of a Dockerfile instruction.
    """
    model_config = ConfigDict(frozen=True)

    effect: Effect
    explanation: str
    cache_hint: str


class LayerReport(BaseModel):
    """
    One annotated instruction inside a stage (or the global ARG list).
    """
    model_config = ConfigDict(frozen=True)

    number: int
    instruction: ParsedInstruction
    effect: Effect
    explanation: str
    cache_hint: str
    notes: List[str] = []


class StageInfo(BaseModel):
    """
    Identity of a build stage: its position, optional alias and base image.
    """
    index: int
    name: str = ""
    base: str = ""

    @property
    def display_name(self) -> str:
        """Stage header as shown in reports."""
        if self.name:
            return f"Stage {self.index} ({self.name})"
        return f"Stage {self.index}"


class StageReport(BaseModel):
    """
    All layers of a single stage plus per-effect counters.
    The FROM layer is listed but not counted.
    """
    stage: StageInfo
    layers: List[LayerReport] = Field(default_factory=list)
    fs_layers: int = 0
    metadata_layers: int = 0
    build_args: int = 0


class Report(BaseModel):
    """
    Complete analysis of a Dockerfile.

    ``global_layers`` holds the ARG instructions that precede the first FROM;
    ``stages`` is index-aligned with ``StageInfo.index``.
    """
    file_path: str
    global_layers: List[LayerReport] = Field(default_factory=list)
    stages: List[StageReport] = Field(default_factory=list)
