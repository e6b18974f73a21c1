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
Converter rendering a layer report as human readable text.
"""
from typing import TextIO

from jinja2 import Template

from ..BUILDERS.descriptor_table import LEGEND
from ..MODELS.layer_report import Report

REPORT_TEMPLATE = """\
{% macro layer_block(layer) %}
  {{ "%2d"|format(layer.number) }}. {{ "%-12s"|format(layer.effect.value) }} {{ layer.instruction.raw }}
      Why : {{ layer.explanation }}
{% if layer.cache_hint %}
      Cache: {{ layer.cache_hint }}
{% endif %}
{% for note in layer.notes %}
      Note : {{ note }}
{% endfor %}
{% endmacro %}
Dockerfile insight for {{ report.file_path }}

{% if report.global_layers %}
Global build args (before first FROM):
{% for layer in report.global_layers %}
{{ layer_block(layer) -}}
{% endfor %}

{% endif %}
{% for stage in report.stages %}
{{ stage.stage.display_name }}
  Base image: {{ stage.stage.base }}
  Layer breakdown:
{% for layer in stage.layers %}
{{ layer_block(layer) -}}
{% endfor %}
  Summary: {{ stage.fs_layers }} filesystem layers | {{ stage.metadata_layers }} metadata steps | {{ stage.build_args }} build args

{% endfor %}
{% if legend %}
Legend:
{% for effect, meaning in legend %}
  {{ effect.value }}: {{ meaning }}
{% endfor %}
{% endif %}
"""


class TextReportConverter:
    """
    Renders a ``Report`` the way it is printed on the terminal.
    """

    def __init__(self, report: Report, show_legend: bool = True):
        """
        :param report: The analysis report to render.
        :param show_legend: Whether to append the effect legend.
        """
        self.report = report
        self.show_legend = show_legend
        self.template = Template(
            REPORT_TEMPLATE,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def convert(self) -> str:
        """
        :return: The rendered report.
        """
        return self.template.render(
            report=self.report,
            legend=LEGEND if self.show_legend else (),
        )

    def write(self, stream: TextIO) -> None:
        """Writes the rendered report to ``stream``."""
        stream.write(self.convert())
