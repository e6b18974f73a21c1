"""
Converters serializing a layer report to JSON or YAML.
"""
import yaml

from ..MODELS.layer_report import Report


class StructuredReportConverter:
    """
    Serializes a ``Report`` for other tools to consume.
    """

    def __init__(self, report: Report):
        self.report = report

    def to_json(self, indent: int = 2) -> str:
        """Returns the report as a JSON document."""
        return self.report.model_dump_json(indent=indent) + "\n"

    def to_yaml(self) -> str:
        """Returns the report as a YAML document, keeping field order."""
        return yaml.safe_dump(
            self.report.model_dump(mode="json"),
            sort_keys=False,
            default_flow_style=False,
        )
