"""LayerDog CLI entry point."""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

import click

from layerdog import __version__
from layerdog.engine.core import LayerEngine
from layerdog.rules.models import Layer
from layerdog.rules.store import CONFIG_DIR_ENV, RULES_FILE_NAME, RuleStore
from layerdog.sound import SoundNotifier


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _engine(ctx: click.Context, *, watch: bool = False) -> LayerEngine:
    config_dir: Path | None = ctx.obj["config_dir"]
    config_path = config_dir / RULES_FILE_NAME if config_dir is not None else None
    return LayerEngine(RuleStore(config_path)).start(watch=watch)


def _terminal_bell(sound_file: str, volume: float) -> None:
    from rich.console import Console

    # The terminal has one sound; file and volume do not apply.
    Console(stderr=True).bell()


def _parse_layer(value: str) -> Layer:
    try:
        return Layer.parse(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.group()
@click.version_option(version=__version__, prog_name="layerdog")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=CONFIG_DIR_ENV,
    default=None,
    help="Directory holding layer-rules.json (default: ~/.layerdog).",
)
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool, config_dir: Path | None) -> None:
    """LayerDog - layered architecture checks for Java code."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_dir"] = config_dir
    _configure_logging(verbose=verbose, quiet=quiet)


# -- configuration ----------------------------------------------------------


@main.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the external rules file from the defaults (no-op if it exists)."""
    engine = _engine(ctx)
    existed = engine.has_external_configuration()
    if not engine.initialize_configuration():
        click.echo("Error: could not create the rules file.", err=True)
        sys.exit(1)
    if existed:
        click.echo(f"Rules file already exists: {engine.configuration_path()}")
    else:
        click.echo(f"Created {engine.configuration_path()}")


@main.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def reset(ctx: click.Context, *, yes: bool) -> None:
    """Overwrite the external rules file with the defaults."""
    engine = _engine(ctx)
    path = engine.configuration_path()
    if not yes and engine.has_external_configuration():
        click.confirm(f"Overwrite {path} with the default rules?", abort=True)
    if not engine.reset_configuration():
        click.echo("Error: could not reset the rules file.", err=True)
        sys.exit(1)
    click.echo(f"Reset {path} to defaults")


@main.command()
@click.pass_context
def path(ctx: click.Context) -> None:
    """Print the external rules file location."""
    click.echo(str(_engine(ctx).configuration_path()))


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show which rules are active and the layers they define."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table

    engine = _engine(ctx)
    document = engine.document
    console = Console()

    external = "present" if engine.has_external_configuration() else "missing"
    console.print(Panel(
        f"Rules file: {engine.configuration_path()} ({external})\n"
        f"Active rules: [bold]{engine.store.source or 'none'}[/]",
        title=f"LayerDog v{__version__}",
        border_style="blue",
    ))

    if document is None:
        console.print("[yellow]No rules loaded; all calls are allowed.[/]")
        return

    table = Table(title=f"Layers (rules v{document.version})", padding=(0, 1))
    table.add_column("layer", style="cyan", no_wrap=True)
    table.add_column("may call")
    table.add_column("business logic")
    table.add_column("description")
    for layer, definition in document.layers.items():
        table.add_row(
            layer.value,
            ", ".join(definition.allowed_calls) or "-",
            "prohibited" if definition.rules.business_logic_prohibited else "allowed",
            definition.description,
        )
    console.print(table)


# -- queries ----------------------------------------------------------------


@main.command()
@click.argument("name")
@click.option("--package", default=None, help="Override the package derived from NAME.")
@click.option(
    "--annotation", "annotations", multiple=True, help="Annotation on the class (repeatable)."
)
@click.pass_context
def classify(
    ctx: click.Context, *, name: str, package: str | None, annotations: tuple[str, ...]
) -> None:
    """Print the layer of the class NAME (qualified or simple name)."""
    from dataclasses import replace

    from layerdog.engine.descriptors import ClassDescriptor

    descriptor = ClassDescriptor.from_qualified_name(name, annotations)
    if package is not None:
        descriptor = replace(descriptor, package_name=package)
    click.echo(_engine(ctx).classify(descriptor).value)


@main.command("check-call")
@click.argument("from_layer", metavar="FROM")
@click.argument("to_layer", metavar="TO")
@click.pass_context
def check_call(ctx: click.Context, *, from_layer: str, to_layer: str) -> None:
    """Check whether layer FROM may call layer TO.

    Exit code 0 = allowed, 1 = not allowed.
    """
    source = _parse_layer(from_layer)
    target = _parse_layer(to_layer)
    engine = _engine(ctx)
    if engine.is_valid_call(source, target):
        click.echo(f"{source.value} -> {target.value}: allowed")
        return
    message = engine.violation_message(source, target, source.value, target.value)
    click.echo(f"{source.value} -> {target.value}: not allowed")
    click.echo(message)
    sys.exit(1)


@main.command()
@click.argument("model_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option("--strict", is_flag=True, default=False, help="Exit 1 if violations found.")
@click.option(
    "--bell",
    is_flag=True,
    default=False,
    help="Ring the terminal bell on violations when the rules enable inspection sounds.",
)
@click.pass_context
def check(
    ctx: click.Context, *, model_file: Path, fmt: str | None, strict: bool, bell: bool
) -> None:
    """Run the layer inspections over the classes described in MODEL_FILE.

    Exit codes: 0 = clean or violations without --strict,
    1 = violations with --strict, 2 = unreadable model file.
    """
    from layerdog.inspections.model import ModelLoadError, load_class_models
    from layerdog.inspections.runner import (
        format_json,
        format_porcelain,
        format_rich,
        run_inspections,
    )

    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        classes = load_class_models(model_file)
    except ModelLoadError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    engine = _engine(ctx)
    notifier = SoundNotifier(engine.sound_configuration, _terminal_bell) if bell else None
    result = run_inspections(engine, classes, notifier=notifier)

    formatters = {
        "rich": format_rich,
        "json": format_json,
        "porcelain": format_porcelain,
    }
    output = formatters[fmt](result)
    if output:
        click.echo(output)

    if strict and result.violations:
        sys.exit(1)


@main.command("watch")
@click.pass_context
def watch_cmd(ctx: click.Context) -> None:
    """Watch the external rules file and report every reload."""
    engine = _engine(ctx, watch=True)
    if not engine.store.is_watching:
        click.echo(
            f"Error: cannot watch {engine.configuration_path()}. Run `layerdog init` first.",
            err=True,
        )
        sys.exit(1)

    def _report() -> None:
        click.echo(f"Reloaded rules ({engine.store.source or 'none'})")

    engine.store.subscribe(_report)
    click.echo(f"Watching {engine.configuration_path()} (Ctrl+C to stop)")
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        click.echo("Stopped.")
    finally:
        engine.close()
