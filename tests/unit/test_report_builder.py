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
Unit tests for the stage/report builder.
"""
import os

import pytest
from dockerlayers.BUILDERS.layer_analyzer import LayerAnalyzer
from dockerlayers.BUILDERS.report_builder import ReportBuilder, detect_copy_source, parse_from
from dockerlayers.MODELS.layer_report import Effect
from dockerlayers.errors import (
    ContinuationError,
    EmptyInputError,
    InstructionBeforeFromError,
    MissingBaseImageError,
)

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")

SIMPLE = """\
ARG GLOBAL_VERSION=3.18
FROM alpine:${GLOBAL_VERSION}
RUN apk add --no-cache curl
COPY . /app
WORKDIR /app
CMD ["./run"]
"""

MULTISTAGE = """\
FROM golang:1.22 AS base
FROM base AS builder
ARG VERSION=1.0
COPY --from=base /src /src
FROM scratch
COPY --from=builder /bin/app /bin/app
ENTRYPOINT ["/bin/app"]
"""


def analyze(content):
    return LayerAnalyzer().analyze_string(content)


def find_layer(stage, keyword):
    return next((layer for layer in stage.layers if layer.instruction.keyword == keyword), None)


def notes_contain(layer, needle):
    return any(needle in note for note in layer.notes)


class TestSingleStage:
    """Tests for a minimal single-stage Dockerfile."""

    def test_global_arg(self):
        """Test that an ARG before FROM lands in the global list."""
        report = analyze(SIMPLE)
        assert len(report.global_layers) == 1
        layer = report.global_layers[0]
        assert layer.effect == Effect.BUILD_ARG
        assert layer.number == 1
        assert notes_contain(layer, "applies globally")

    def test_stage_counts(self):
        """Test per-effect counters of the stage."""
        report = analyze(SIMPLE)
        assert len(report.stages) == 1
        stage = report.stages[0]
        assert stage.stage.base == "alpine:${GLOBAL_VERSION}"
        assert stage.stage.name == ""
        assert stage.fs_layers == 2
        assert stage.metadata_layers == 2
        assert stage.build_args == 0
        assert len(stage.layers) == 5
        assert [layer.number for layer in stage.layers] == [1, 2, 3, 4, 5]

    def test_layer_annotations(self):
        """Test the effect and notes of each layer."""
        stage = analyze(SIMPLE).stages[0]
        assert stage.layers[0].effect == Effect.STAGE_START
        assert notes_contain(stage.layers[0], 'pulls "alpine:${GLOBAL_VERSION}"')
        run = find_layer(stage, "RUN")
        assert run.effect == Effect.FILESYSTEM
        assert notes_contain(run, "Cleanup temp files")
        copy = find_layer(stage, "COPY")
        assert notes_contain(copy, "build context")
        assert find_layer(stage, "WORKDIR").notes == []

    def test_file_path_is_recorded(self):
        """Test that analyze() records an absolute path."""
        path = os.path.join(DATA_DIR, "simple", "Dockerfile")
        report = LayerAnalyzer().analyze(path)
        assert report.file_path == os.path.abspath(path)
        assert os.path.isabs(report.file_path)


class TestMultiStage:
    """Tests for multi-stage Dockerfiles and COPY --from resolution."""

    def test_stages_and_aliases(self):
        """Test that every FROM opens a new indexed stage."""
        report = analyze(MULTISTAGE)
        assert len(report.stages) == 3
        assert [s.stage.index for s in report.stages] == [0, 1, 2]
        assert report.stages[0].stage.name == "base"
        assert report.stages[1].stage.name == "builder"
        assert report.stages[2].stage.base == "scratch"
        assert notes_contain(report.stages[0].layers[0], "COPY --from=base")

    def test_copy_from_previous_stages(self):
        """Test that COPY --from notes reference the source stage."""
        report = analyze(MULTISTAGE)
        builder = report.stages[1]
        assert builder.build_args == 1
        assert notes_contain(find_layer(builder, "COPY"), "stage 0 (base)")
        assert notes_contain(find_layer(builder, "ARG"), "use ENV")
        final = report.stages[2]
        assert notes_contain(find_layer(final, "COPY"), "stage 1 (builder)")
        assert find_layer(final, "ENTRYPOINT").effect == Effect.METADATA

    def test_from_earlier_stage(self):
        """Test that FROM <alias> is reported as building on that stage."""
        report = analyze(MULTISTAGE)
        assert notes_contain(report.stages[1].layers[0], "continues from stage 0 (base)")

    def test_copy_from_numeric_index_and_case(self):
        """Test resolution by index, by upper-cased alias and with a space-separated flag."""
        report = analyze(
            "FROM golang AS Build\n"
            "FROM alpine\n"
            "COPY --from=0 /a /a\n"
            "COPY --from=BUILD /b /b\n"
            "COPY --from build /c /c\n"
        )
        copies = [layer for layer in report.stages[1].layers if layer.instruction.keyword == "COPY"]
        for layer in copies:
            assert notes_contain(layer, "stage 0 (Build)")

    def test_copy_from_unknown_reference(self):
        """Test that an unknown --from reference is flagged as external."""
        report = analyze("FROM alpine\nCOPY --from=nginx:latest /etc/nginx /etc/nginx\n")
        copy = find_layer(report.stages[0], "COPY")
        assert notes_contain(copy, '"nginx:latest"')
        assert notes_contain(copy, "Make sure the stage or image exists")

    def test_copy_from_later_stage_is_not_resolved(self):
        """Test that aliases only resolve once declared."""
        report = analyze("FROM alpine\nCOPY --from=late /x /x\nFROM busybox AS late\n")
        assert notes_contain(find_layer(report.stages[0], "COPY"), "not a stage declared above")

    def test_duplicate_alias_first_wins(self):
        """Test that a repeated alias keeps pointing at the first stage."""
        report = analyze(
            "FROM golang AS build\n"
            "FROM rust AS BUILD\n"
            "FROM alpine\n"
            "COPY --from=build /app /app\n"
        )
        second = report.stages[1]
        assert second.stage.name == "BUILD"
        assert notes_contain(second.layers[0], "already used by stage 0")
        assert notes_contain(find_layer(report.stages[2], "COPY"), "stage 0 (build)")

    def test_from_flags_are_skipped(self):
        """Test FROM with --platform and a lower-case 'as'."""
        report = analyze("FROM --platform=$BUILDPLATFORM node:20 as web\nRUN npm ci\n")
        assert report.stages[0].stage.base == "node:20"
        assert report.stages[0].stage.name == "web"


class TestAddNotes:
    """Tests for ADD annotations."""

    def test_remote_and_archive(self):
        report = analyze("FROM alpine\nADD https://example.com/tool.tar.gz /opt/\n")
        add = find_layer(report.stages[0], "ADD")
        assert add.effect == Effect.FILESYSTEM
        assert len(add.notes) == 2
        assert notes_contain(add, "Remote URLs")
        assert notes_contain(add, "Tar archives")

    def test_local_file(self):
        report = analyze("FROM alpine\nADD app.py /app/\n")
        assert find_layer(report.stages[0], "ADD").notes == []


class TestInvariants:
    """Tests for structural properties of every report."""

    @pytest.mark.parametrize("content", [SIMPLE, MULTISTAGE])
    def test_counts_match_layers(self, content):
        """Test that counters and layer lists agree."""
        for i, stage in enumerate(analyze(content).stages):
            assert stage.stage.index == i
            effects = [layer.effect for layer in stage.layers]
            assert stage.fs_layers == effects.count(Effect.FILESYSTEM)
            assert stage.metadata_layers == effects.count(Effect.METADATA)
            assert stage.build_args == effects.count(Effect.BUILD_ARG)
            assert len(stage.layers) == stage.fs_layers + stage.metadata_layers + stage.build_args + 1
            assert effects[0] == Effect.STAGE_START

    def test_global_args_keep_order(self):
        """Test that several global ARGs stay in source order."""
        report = analyze("ARG A=1\nARG B=2\nFROM alpine:$A\n")
        assert [layer.instruction.args for layer in report.global_layers] == ["A=1", "B=2"]
        assert [layer.number for layer in report.global_layers] == [1, 2]

    def test_analysis_is_deterministic(self):
        """Test that analyzing the same text twice yields equal reports."""
        assert analyze(MULTISTAGE) == analyze(MULTISTAGE)

    def test_unknown_instruction(self):
        """Test that an unknown keyword is classified as metadata."""
        report = analyze("FROM alpine\nCHECKPOINT now\n")
        stage = report.stages[0]
        layer = find_layer(stage, "CHECKPOINT")
        assert layer.effect == Effect.METADATA
        assert layer.explanation.startswith("Recorded as metadata")
        assert stage.metadata_layers == 1

    def test_args_only_file_has_no_stages(self):
        """Test that a file with only global ARGs yields no stages."""
        report = analyze("ARG A=1\n")
        assert report.stages == []
        assert len(report.global_layers) == 1


class TestErrors:
    """Tests for fatal analysis errors."""

    def test_missing_from(self):
        with pytest.raises(InstructionBeforeFromError) as exc:
            analyze("RUN echo hi\nFROM alpine\n")
        assert exc.value.line == 1
        assert exc.value.keyword == "RUN"
        assert str(exc.value) == "line 1: Dockerfile must start with FROM (found RUN)"

    def test_dangling_continuation(self):
        with pytest.raises(ContinuationError):
            analyze("FROM alpine\nRUN foo \\\n")

    def test_missing_base_image(self):
        with pytest.raises(MissingBaseImageError) as exc:
            analyze("FROM alpine\nFROM --platform=linux/amd64\n")
        assert exc.value.line == 2
        assert "FROM instruction missing base image" in str(exc.value)

    def test_empty_input(self):
        with pytest.raises(EmptyInputError):
            analyze("# only a comment\n\n")

    def test_empty_instruction_list(self):
        with pytest.raises(EmptyInputError) as exc:
            ReportBuilder("Dockerfile").build([])
        assert "Dockerfile" in str(exc.value)


class TestHelpers:
    """Tests for argument helpers."""

    def test_parse_from(self):
        assert parse_from("ubuntu:22.04") == ("ubuntu:22.04", "")
        assert parse_from("--platform=linux/arm64 ubuntu AS base") == ("ubuntu", "base")
        assert parse_from("ubuntu AS") == ("ubuntu", "")
        assert parse_from("--platform=linux/arm64") == ("", "")
        assert parse_from("") == ("", "")

    def test_detect_copy_source(self):
        assert detect_copy_source("--from=builder /a /b") == "builder"
        assert detect_copy_source("--chown=1000 --from builder /a /b") == "builder"
        assert detect_copy_source(". /app") == ""
        assert detect_copy_source("/a --from") == ""


class TestEntryPoints:
    """Tests that string and file input produce the same report."""

    def test_string_matches_file(self, tmp_path):
        """Test analyze_string against analyze on identical bytes."""
        content = "ARG V=1\nFROM alpine:$V AS base\x0c\nRUN x\x1cy \\\n  z\r\nCOPY --from=base /a /a\n"
        path = tmp_path / "Dockerfile"
        path.write_bytes(content.encode("utf-8"))

        from_file = LayerAnalyzer().analyze(str(path))
        from_string = LayerAnalyzer().analyze_string(content, file_path=from_file.file_path)

        assert from_string == from_file
        assert [layer.instruction.line for layer in from_file.stages[0].layers] == [2, 3, 5]
