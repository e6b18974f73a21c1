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
Builds the stage/layer report from a stream of parsed instructions.

Instructions are consumed strictly in order. The only state carried between
them is the current stage index and the alias table, both owned by a build
context that lives for a single ``build`` call.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..MODELS.dockerfile_ast import ParsedInstruction
from ..MODELS.layer_report import Effect, LayerReport, Report, StageInfo, StageReport
from ..errors import EmptyInputError, InstructionBeforeFromError, MissingBaseImageError
from .descriptor_table import descriptor_for

logger = logging.getLogger(__name__)

GLOBAL_ARG_NOTE = "This ARG applies globally and can be referenced in the first FROM."
RUN_NOTE = "Cleanup temp files within the same RUN to prevent them from sticking in the layer."
STAGE_ARG_NOTE = "Only available during build; use ENV if the value is needed at runtime."
BUILD_CONTEXT_NOTE = "Takes files from the build context, so editing those files will invalidate this layer."
REMOTE_ADD_NOTE = "Remote URLs are downloaded at build time; network changes can invalidate cache."
ARCHIVE_ADD_NOTE = "Tar archives are auto-extracted, which can surprise caching when archive contents change."

_COUNTERS = {
    Effect.FILESYSTEM: "fs_layers",
    Effect.METADATA: "metadata_layers",
    Effect.BUILD_ARG: "build_args",
}


class _BuildContext:
    """
    Mutable state of one build: the report in progress, the current stage
    index (-1 before the first FROM) and the alias table.
    """

    def __init__(self, file_path: str):
        self.report = Report(file_path=file_path)
        self.stage_index = -1
        self.aliases: Dict[str, int] = {}

    def ensure_stage(self, index: int) -> StageReport:
        """Returns the stage at ``index``, creating it and any gap before it."""
        stages = self.report.stages
        while len(stages) <= index:
            stages.append(StageReport(stage=StageInfo(index=len(stages))))
        return stages[index]

    def register_alias(self, key: str, index: int) -> int:
        """
        Claims ``key`` for stage ``index`` unless an earlier stage holds it.

        :return: The stage index that owns the key afterwards.
        """
        return self.aliases.setdefault(key.lower(), index)

    def resolve(self, ref: str) -> Optional[StageReport]:
        """Finds a previously declared stage by alias or index, ignoring case."""
        index = self.aliases.get(ref.lower())
        if index is None:
            return None
        return self.report.stages[index]


class ReportBuilder:
    """
    Turns parsed instructions into a ``Report`` of stages and annotated layers.
    """

    def __init__(self, file_path: str):
        """
        :param file_path: Path recorded in the report, used in messages.
        """
        self.file_path = file_path

    def build(self, instructions: Iterable[ParsedInstruction]) -> Report:
        """
        Processes every instruction and returns the finished report.

        :param instructions: Parsed instructions in source order.
        :return: The completed report.
        :raises EmptyInputError: If there are no instructions.
        :raises MissingBaseImageError: If a FROM names no base image.
        :raises InstructionBeforeFromError: If a non-ARG instruction precedes the first FROM.
        """
        instructions = list(instructions)
        if not instructions:
            raise EmptyInputError(f"no Dockerfile instructions found in {self.file_path}")

        ctx = _BuildContext(self.file_path)
        for inst in instructions:
            if not inst.keyword:
                continue
            if inst.keyword == "FROM":
                self._start_stage(ctx, inst)
            elif ctx.stage_index == -1:
                self._add_global(ctx, inst)
            else:
                self._add_layer(ctx, inst)
        return ctx.report

    def _start_stage(self, ctx: _BuildContext, inst: ParsedInstruction) -> None:
        base, alias = parse_from(inst.args)
        if not base:
            raise MissingBaseImageError(line=inst.line)

        parent = ctx.resolve(base)
        if parent is not None and parent.stage.name.lower() != base.lower():
            # FROM follows stage names, never bare indices.
            parent = None
        ctx.stage_index += 1
        stage = ctx.ensure_stage(ctx.stage_index)
        stage.stage.base = base
        stage.stage.name = alias
        logger.debug("line %d: stage %d starts from %s", inst.line, ctx.stage_index, base)

        if parent is not None:
            notes = [f"Stage resets here and continues from {_stage_label(parent, base)}."]
        else:
            notes = [f'Stage resets here and pulls "{base}".']

        if alias:
            owner = ctx.register_alias(alias, ctx.stage_index)
            if owner == ctx.stage_index:
                notes.append(f'Alias "{alias}" lets you reference this stage via COPY --from={alias}.')
            else:
                notes.append(
                    f'Alias "{alias}" is already used by stage {owner}; '
                    f'COPY --from={alias} keeps resolving to stage {owner}.'
                )
        ctx.register_alias(str(ctx.stage_index), ctx.stage_index)

        stage.layers.append(_make_layer(inst, len(stage.layers) + 1, notes))

    def _add_global(self, ctx: _BuildContext, inst: ParsedInstruction) -> None:
        # Docker only accepts ARG ahead of the first FROM.
        if inst.keyword != "ARG":
            raise InstructionBeforeFromError(inst.keyword, line=inst.line)
        layers = ctx.report.global_layers
        layers.append(_make_layer(inst, len(layers) + 1, [GLOBAL_ARG_NOTE]))

    def _add_layer(self, ctx: _BuildContext, inst: ParsedInstruction) -> None:
        stage = ctx.ensure_stage(ctx.stage_index)

        notes: List[str] = []
        if inst.keyword == "COPY":
            notes.append(_copy_note(ctx, inst.args))
        elif inst.keyword == "ADD":
            if "http://" in inst.args or "https://" in inst.args:
                notes.append(REMOTE_ADD_NOTE)
            if ".tar" in inst.args:
                notes.append(ARCHIVE_ADD_NOTE)
        elif inst.keyword == "RUN":
            notes.append(RUN_NOTE)
        elif inst.keyword == "ARG":
            notes.append(STAGE_ARG_NOTE)

        layer = _make_layer(inst, len(stage.layers) + 1, notes)
        counter = _COUNTERS.get(layer.effect)
        if counter:
            setattr(stage, counter, getattr(stage, counter) + 1)
        stage.layers.append(layer)
        logger.debug("line %d: %s classified as %s", inst.line, inst.keyword, layer.effect.value)


def _make_layer(inst: ParsedInstruction, number: int, notes: List[str]) -> LayerReport:
    descriptor = descriptor_for(inst.keyword)
    return LayerReport(
        number=number,
        instruction=inst,
        effect=descriptor.effect,
        explanation=descriptor.explanation,
        cache_hint=descriptor.cache_hint,
        notes=notes,
    )


def _stage_label(stage: StageReport, ref: str) -> str:
    return f"stage {stage.stage.index} ({stage.stage.name or ref})"


def _copy_note(ctx: _BuildContext, args: str) -> str:
    source = detect_copy_source(args)
    if not source:
        return BUILD_CONTEXT_NOTE

    stage = ctx.resolve(source)
    if stage is None:
        return f'Copies from "{source}", which is not a stage declared above. Make sure the stage or image exists.'
    return (
        f"Copies from {_stage_label(stage, source)}. "
        "Cache depends on that stage's output instead of local files."
    )


def parse_from(args: str) -> Tuple[str, str]:
    """
    Extracts the base image and optional alias from FROM arguments.

    Leading ``--flag`` tokens (``--platform=...``) are skipped; the alias is
    the token following a case-insensitive ``AS``.

    :param args: Arguments of the FROM instruction.
    :return: ``(base, alias)``; either may be empty.
    """
    tokens = args.split()
    i = 0
    while i < len(tokens) and tokens[i].startswith("--"):
        i += 1
    if i >= len(tokens):
        return "", ""

    base = tokens[i]
    alias = ""
    if i + 2 < len(tokens) and tokens[i + 1].upper() == "AS":
        alias = tokens[i + 2]
    return base, alias


def detect_copy_source(args: str) -> str:
    """
    Returns the stage or image named by ``--from=<ref>`` or ``--from <ref>``.

    :param args: Arguments of the COPY instruction.
    :return: The reference, or an empty string when the copy reads the build context.
    """
    tokens = args.split()
    for i, token in enumerate(tokens):
        if token.startswith("--from="):
            return token[len("--from="):]
        if token == "--from" and i + 1 < len(tokens):
            return tokens[i + 1]
    return ""
