"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from crdoc.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    load_configuration,
    per_kind_routing,
    write_placeholder_configuration,
)
from crdoc.configuration.runtime_settings import UnmatchedTOCPolicy
from crdoc.document_rendering import builtin_template_names
from crdoc.run_execution import RunExecutionError, execute_documentation_run
from crdoc.schema_management import FieldOrder

ENV_PREFIX = "CRDOC"


class CliError(Exception):
    """Custom CLI error."""


class RunFailedError(CliError):
    """Raised after a run that wrote documents but excluded failed CRDs."""


@click.group(
    context_settings={
        "help_option_names": ["-h", "--help"],
        "auto_envvar_prefix": ENV_PREFIX,
    }
)
@click.version_option(package_name="crdoc")
def cli() -> None:
    """Output Markdown documentation from Kubernetes CustomResourceDefinition manifests."""


@cli.command(name="generate")
@click.option(
    "--resources",
    "-r",
    "resources",
    type=click.Path(path_type=str),
    envvar=f"{ENV_PREFIX}_RESOURCES",
    help="Path to a YAML/JSON file or directory containing CustomResourceDefinitions",
)
@click.option(
    "--output",
    "-o",
    "output",
    type=click.Path(path_type=str),
    envvar=f"{ENV_PREFIX}_OUTPUT",
    help="Directory receiving the generated Markdown documents",
)
@click.option(
    "--template",
    "-t",
    "template",
    envvar=f"{ENV_PREFIX}_TEMPLATE",
    help="Built-in template name or path to a custom template file [default: markdown.tmpl]",
)
@click.option(
    "--toc",
    "-c",
    "toc",
    type=click.Path(path_type=str),
    envvar=f"{ENV_PREFIX}_TOC",
    help="Path to a table of contents YAML file that filters and orders kinds",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=str),
    envvar=f"{ENV_PREFIX}_CONFIG",
    help="Path to a crdoc YAML configuration file",
)
@click.option(
    "--include-unserved/--exclude-unserved",
    "include_unserved",
    default=None,
    help="Document versions that are not served [default: include]",
)
@click.option(
    "--toc-unmatched",
    type=click.Choice([policy.value for policy in UnmatchedTOCPolicy]),
    help="Handling of TOC entries that match no CRD [default: skip]",
)
@click.option(
    "--field-order",
    type=click.Choice([order.value for order in FieldOrder]),
    help="Property order within each version [default: declaration]",
)
@click.option(
    "--per-kind-group",
    "per_kind_groups",
    multiple=True,
    help="API group whose kinds are written to one document per kind (repeatable)",
)
@click.option("--workers", "max_workers", type=int, help="Concurrent CRD builds [default: 4]")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def generate(  # pylint: disable=too-many-arguments
    resources: str | None,
    output: str | None,
    template: str | None,
    toc: str | None,
    config_path: str | None,
    include_unserved: bool | None,
    toc_unmatched: str | None,
    field_order: str | None,
    per_kind_groups: tuple[str, ...],
    max_workers: int | None,
    verbose: bool,
) -> None:
    """Generate Markdown documents, one per API group, from CRD manifests.

    \b
    Examples:
      crdoc generate --resources example/crds --output example/docs
      crdoc generate -r example/crds -o example/docs --template frontmatter.tmpl
      crdoc generate -r example/crds -o example/docs --toc example/toc.yaml
    """
    _configure_logging(verbose)
    try:
        configuration = load_configuration(
            config_path,
            {
                "resources": resources,
                "output": output,
                "template": template,
                "toc": toc,
                "include_unserved_versions": include_unserved,
                "toc_unmatched": toc_unmatched,
                "field_order": field_order,
                "routing": per_kind_routing(per_kind_groups) if per_kind_groups else None,
                "max_workers": max_workers,
            },
        )
        outcome = execute_documentation_run(configuration)
    except (ConfigurationError, RunExecutionError) as exc:
        raise CliError(str(exc)) from exc

    for path in outcome.written_paths:
        click.echo(str(path))
    if not outcome.succeeded:
        for failure in outcome.failures:
            click.echo(f"error: {failure.describe()}", err=True)
        raise RunFailedError(f"{len(outcome.failures)} CustomResourceDefinition(s) failed.")


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="list-templates")
def list_templates() -> None:
    """List the built-in templates."""
    for name in builtin_template_names():
        click.echo(name)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
