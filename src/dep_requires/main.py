import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from . import __version__
from .checker import CheckStatus, get_requirement_checker
from .cli_config import (
    apply_config_data,
    create_sample_config,
    get_config,
    load_config,
    load_config_file,
    RequiresConfig,
    validate_config_values,
)
from .dependency import Dependency
from .error_handling import VersionException, setup_error_handling
from .manifest import parse_manifest
from .operators import parse_constraint
from .prober import VERSION_ARGUMENTS, probe_version
from .reporting import CheckReporter, report_to_dict
from .resolver import resolve_executable
from .structured_logging import (
    clear_check_context,
    configure_logging,
    set_check_context,
)

console = Console()
err_console = Console(stderr=True)

# Exit codes for single-tool commands
EXIT_OK = 0
EXIT_UNSATISFIED = 1
EXIT_ERROR = 2


def _exit_code_for(status: CheckStatus) -> int:
    if status == CheckStatus.SATISFIED:
        return EXIT_OK
    if status == CheckStatus.UNSATISFIED:
        return EXIT_UNSATISFIED
    return EXIT_ERROR


def output_json_report(report, source: str, output_file: Optional[str] = None) -> None:
    """Export results as JSON."""
    json_output = json.dumps(report_to_dict(report, source), indent=2, ensure_ascii=False)

    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(json_output)
        err_console.print(f"✅ Results saved to {output_file}", style="green")
    else:
        print(json_output)


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version information")
@click.pass_context
def cli(ctx, version):
    """
    🔍 dep-requires: check that external tools are installed at the right version

    Resolves executables on PATH, asks them for their version and compares it
    against a requirement.
    """
    if version:
        console.print(f"dep-requires version {__version__}", style="bold blue")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        return

    config = get_config()
    configure_logging(config.logging.log_level, config.logging.enable_json)
    setup_error_handling(
        log_level=getattr(logging, config.logging.log_level.upper(), logging.WARNING),
        log_to_stderr=True,
    )


@cli.command()
@click.argument("name")
@click.option("--quiet", "-q", is_flag=True, help="Only set the exit code")
def exists(name: str, quiet: bool) -> None:
    """
    Check whether an executable is on PATH.

    Exits 0 when found and 1 otherwise.
    """
    try:
        path = resolve_executable(name)
    except VersionException as e:
        if not quiet:
            console.print(f"❌ {e.message}", style="red")
        sys.exit(EXIT_UNSATISFIED)

    if not quiet:
        console.print(f"✅ {name} found at {path}", style="green")


@cli.command()
@click.argument("name")
@click.argument("constraint", required=False)
@click.option("--quiet", "-q", is_flag=True, help="Only set the exit code")
def check(name: str, constraint: Optional[str], quiet: bool) -> None:
    """
    Check an executable against a version constraint.

    CONSTRAINT is a comparison and a version such as ">=2.30" or "18.14.1"
    (a bare version means equal). Without it only presence is checked.

    Exit codes: 0 satisfied, 1 version mismatch, 2 missing or undeterminable.

    Examples:

      dep-requires check git ">=2.30"

      dep-requires check node 18.14.1
    """
    if constraint:
        try:
            operator, version = parse_constraint(constraint)
        except VersionException as e:
            raise click.BadParameter(e.message, param_hint="CONSTRAINT")
        dependency = Dependency(name=name, version=version, operator=operator)
    else:
        dependency = Dependency(name=name)

    result = get_requirement_checker(get_config().probe).check(dependency)

    if not quiet:
        style = "green" if result.ok else "red"
        found = f" (found {result.found_version})" if result.found_version else ""
        console.print(
            f"{result.status.value}: {name} {dependency.requirement}{found} {result.message}",
            style=style,
        )

    sys.exit(_exit_code_for(result.status))


@cli.command()
@click.argument("name")
def version(name: str) -> None:
    """Print the version an executable reports."""
    try:
        detected = probe_version(name, get_config().probe)
    except VersionException as e:
        err_console.print(f"❌ {e.message}", style="red")
        sys.exit(EXIT_ERROR)

    click.echo(detected)


@cli.command()
@click.argument(
    "manifest_path", type=click.Path(exists=True, readable=True, dir_okay=False)
)
@click.option(
    "--output-format",
    type=click.Choice(["console", "json"], case_sensitive=False),
    default=None,
    help="Output format for results (default from config or console)",
)
@click.option(
    "--output-file",
    "-o",
    type=click.Path(),
    help="Save results to file (JSON format only)",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-critical output")
@click.option(
    "--allow-missing",
    is_flag=True,
    help="Do not fail when a declared tool is missing from PATH",
)
def scan(
    manifest_path: str,
    output_format: Optional[str],
    output_file: Optional[str],
    quiet: bool,
    allow_missing: bool,
) -> None:
    """
    Check every tool declared in a requirements manifest.

    The manifest is a TOML, JSON or YAML file with a "tools" table mapping
    executable names to constraints.

    Examples:

      dep-requires scan tools.toml

      dep-requires scan tools.toml --output-format json -o results.json
    """
    config = load_config()
    final_format = (output_format or config.output.output_format).lower()
    quiet = quiet or config.output.quiet
    fail_on_missing = config.output.fail_on_missing and not allow_missing

    if output_file and final_format != "json":
        raise click.ClickException("Output file can only be used with JSON format")

    try:
        dependencies = parse_manifest(manifest_path)
    except ValueError as e:
        raise click.ClickException(f"Failed to parse manifest: {e}")

    check_id = f"check_{int(time.time())}"
    set_check_context(
        check_id=check_id,
        source_file=manifest_path,
        total_dependencies=len(dependencies),
    )
    try:
        report = get_requirement_checker(config.probe).check_all(dependencies)
    finally:
        clear_check_context()

    if final_format == "json":
        output_json_report(report, manifest_path, output_file)
    elif not quiet:
        CheckReporter(console).print_report(report, manifest_path)

    failures = [
        result
        for result in report.failures
        if fail_on_missing or result.status != CheckStatus.MISSING
    ]
    if failures:
        if quiet and final_format != "json":
            err_console.print(
                f"❌ {len(failures)} tool requirement(s) not met in {manifest_path}",
                style="red",
            )
        sys.exit(EXIT_UNSATISFIED)


@cli.command()
def info():
    """Show how versions are detected and usage examples."""
    flags = ", ".join(VERSION_ARGUMENTS)
    info_text = f"""
[bold blue]🔍 Version Detection:[/bold blue]

• Executables are resolved on [cyan]PATH[/cyan]
• Each is run with [green]{flags}[/green] in turn
• The first [yellow]major.minor[.patch][/yellow] found in the output wins

[bold blue]⚖️  Constraints:[/bold blue]

• [green]>=1.2[/green]  [green]<=1.2[/green]  [green]>1.2[/green]  [green]<1.2[/green]  [green]=1.2[/green] (a bare version means =)
• [green]*[/green] in a manifest checks presence only

[bold blue]🌍 Environment Variables:[/bold blue]

• [cyan]DEP_REQUIRES_TIMEOUT[/cyan] - Seconds to wait for each probe
• [cyan]DEP_REQUIRES_MERGE_STDERR[/cyan] - Search stderr output too
• [cyan]DEP_REQUIRES_LOG_LEVEL[/cyan] - Logging level
• [cyan]DEP_REQUIRES_OUTPUT_FORMAT[/cyan] - console or json

[bold blue]📄 Configuration Files:[/bold blue]

• [green].dep-requires.json[/green] / .yaml / .toml - Project-level config
• [green]~/.config/dep-requires/config.json[/green] - User-level config

[bold blue]💡 Usage Examples:[/bold blue]

  dep-requires exists git
  dep-requires check node ">=18"
  dep-requires version iptables-save
  dep-requires scan tools.toml --output-format json
"""
    console.print(
        Panel(
            info_text,
            title="[bold]dep-requires Information[/bold]",
            border_style="blue",
        )
    )


@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command("init")
@click.option(
    "--path",
    type=click.Path(),
    default=".dep-requires.json",
    help="Path where to create the config file",
    show_default=True,
)
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def config_init(path: str, force: bool):
    """Create a sample configuration file."""
    config_path = Path(path)

    if config_path.exists() and not force:
        console.print(f"⚠️  Config file already exists at {config_path}", style="yellow")
        console.print("Use --force to overwrite", style="dim")
        return

    try:
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(create_sample_config())
    except OSError as e:
        raise click.ClickException(f"Failed to create config file: {e}")

    console.print(f"✅ Created configuration file at {config_path}", style="green")


@config.command("show")
def config_show():
    """Show current configuration settings."""
    current_config = get_config()

    console.print(Panel("[bold blue]🔧 Configuration[/bold blue]", border_style="blue"))

    console.print("\n[bold cyan]🔎 Probe Settings:[/bold cyan]")
    timeout = current_config.probe.timeout_seconds
    console.print(f"  Timeout: {f'{timeout}s' if timeout else 'none'}")
    console.print(f"  Merge stderr: {current_config.probe.merge_stderr}")
    console.print(f"  Encoding: {current_config.probe.encoding}")

    console.print("\n[bold cyan]📝 Logging Settings:[/bold cyan]")
    console.print(f"  Log Level: {current_config.logging.log_level}")
    console.print(f"  JSON Logs: {current_config.logging.enable_json}")

    console.print("\n[bold cyan]📤 Output Settings:[/bold cyan]")
    console.print(f"  Format: {current_config.output.output_format}")
    console.print(f"  Quiet: {current_config.output.quiet}")
    console.print(f"  Fail on Missing: {current_config.output.fail_on_missing}")


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
def config_validate(config_file: str):
    """Validate a configuration file."""
    config_data = load_config_file(Path(config_file))

    if not isinstance(config_data, dict):
        console.print(f"❌ Could not load config from {config_file}", style="red")
        sys.exit(1)

    candidate = RequiresConfig()
    apply_config_data(candidate, config_data)
    errors = validate_config_values(candidate)

    if errors:
        console.print("❌ Configuration validation failed:", style="red")
        for error in errors:
            console.print(f"  • {error}", style="red")
        sys.exit(1)

    console.print(f"✅ Configuration file {config_file} is valid", style="green")


if __name__ == "__main__":
    cli()
