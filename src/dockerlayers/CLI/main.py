"""
Command Line Interface for dockerlayers.
"""
import logging

import click
from pydantic import ValidationError

from ..BUILDERS.layer_analyzer import LayerAnalyzer
from ..CONVERTERS.to_structured import StructuredReportConverter
from ..CONVERTERS.to_text import TextReportConverter
from ..UTILS.settings import AnalyzerSettings, OutputFormat
from ..errors import DockerfileAnalysisError


@click.command()
@click.option('--file', '-f', 'dockerfile', default=None, help='Path to the Dockerfile to inspect')
@click.option('--format', '-o', 'output_format', type=click.Choice([f.value for f in OutputFormat]),
              default=None, help='Output format')
@click.option('--no-legend', is_flag=True, help='Omit the effect legend from text output')
@click.option('--env-file', default='.env', help='Dotenv file with DOCKERLAYERS_* settings')
@click.option('--verbose', '-v', is_flag=True, help='Log analysis steps to stderr')
def cli(dockerfile, output_format, no_legend, env_file, verbose):
    """
    Explain how each Dockerfile instruction affects image layers and the build cache.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    try:
        settings = AnalyzerSettings.load(env_file)
    except ValidationError as e:
        raise click.ClickException(f"invalid settings: {e}")

    path = dockerfile or settings.dockerfile
    fmt = OutputFormat(output_format) if output_format else settings.output_format

    try:
        report = LayerAnalyzer().analyze(path)
    except DockerfileAnalysisError as e:
        raise click.ClickException(str(e))
    except OSError as e:
        raise click.ClickException(f"cannot read {path}: {e.strerror or e}")

    if fmt == OutputFormat.JSON:
        output = StructuredReportConverter(report).to_json()
    elif fmt == OutputFormat.YAML:
        output = StructuredReportConverter(report).to_yaml()
    else:
        output = TextReportConverter(report, show_legend=settings.legend and not no_legend).convert()
    click.echo(output, nl=False)


def main():
    """
    Main entry point for the CLI.
    """
    cli()


if __name__ == '__main__':
    main()
