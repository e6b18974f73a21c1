"""
Settings for the analyzer, read from the environment and an optional
dotenv file.
"""
import os
from enum import Enum
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values
from pydantic import BaseModel

ENV_PREFIX = "DOCKERLAYERS_"


class OutputFormat(str, Enum):
    """
    Output formats understood by the CLI.
    """
    TEXT = "text"
    JSON = "json"
    YAML = "yaml"


class AnalyzerSettings(BaseModel):
    """
    Defaults applied when the CLI is not given explicit options.
    """
    dockerfile: str = "Dockerfile"
    output_format: OutputFormat = OutputFormat.TEXT
    legend: bool = True

    @classmethod
    def load(cls, env_file: Optional[str] = ".env", environ: Optional[Mapping[str, str]] = None) -> "AnalyzerSettings":
        """
        Loads settings from ``DOCKERLAYERS_*`` variables.

        The process environment wins over the dotenv file; empty values are
        ignored.

        :param env_file: Optional dotenv file; skipped if it does not exist.
        :param environ: Environment to read, defaults to ``os.environ``.
        :return: Validated settings.
        :raises pydantic.ValidationError: If a value cannot be coerced.
        """
        values: Dict[str, Optional[str]] = {}
        if env_file and os.path.isfile(env_file):
            values.update(dotenv_values(env_file))
        values.update(os.environ if environ is None else environ)

        fields = {}
        for name in cls.model_fields:
            value = values.get(ENV_PREFIX + name.upper())
            if value:
                fields[name] = value
        return cls(**fields)
