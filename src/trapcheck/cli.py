from __future__ import annotations

from pathlib import Path

import typer

app = typer.Typer(name="trapcheck", help="Crash-isolating unit test harness")

USAGE = """\
trapcheck unit test harness

	usage: trapcheck run [-h] [-c] [-k] [-s] [-v] [--config PATH] [--suite MODULE:ATTR] [-]

	-h	print this help message and exit (unsuccessfully so tests do not pass)
	-c	turn colorized output on (forced on)
	-k	keep any temporary file
	-s	silent mode
	-v	mirror the debug log to stderr
	-	stop processing command line arguments

This program executes a series of tests against a component under test. It
will return zero on success and non zero on failure. The tests and results will
be printed out as executed.
"""


def _print_usage(value: bool) -> None:
    if value:
        typer.echo(USAGE, err=True)
        raise typer.Exit(1)


@app.command(
    context_settings={"help_option_names": [], "allow_interspersed_args": False}
)
def run(
    ignored: list[str] | None = typer.Argument(
        None, hidden=True, help="Anything after '-' is ignored"
    ),
    usage: bool = typer.Option(
        False,
        "-h",
        "--help",
        is_eager=True,
        expose_value=False,
        callback=_print_usage,
        help="Print usage and exit unsuccessfully",
    ),
    color: bool = typer.Option(False, "-c", "--color", help="Colorize output"),
    keep: bool = typer.Option(
        False, "-k", "--keep", help="Keep temporary artifacts after the run"
    ),
    silent: bool = typer.Option(False, "-s", "--silent", help="Silent mode"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
    config: str | None = typer.Option(None, help="Path to harness YAML config"),
    suite: str | None = typer.Option(
        None, help="Suite to run, as 'package.module:attribute'"
    ),
):
    """Run a suite and exit with its failed count."""
    from trapcheck.config import HarnessConfig, load_config
    from trapcheck.runner import FATAL_STATUS, SuiteDriver, exit_status
    from trapcheck.suite import load_suite
    from trapcheck.trap import HarnessSetupError

    try:
        if config is not None:
            config_path = Path(config)
            if not config_path.exists():
                typer.echo(f"Error: config file not found: {config}", err=True)
                raise typer.Exit(1)
            harness_config = load_config(config_path)
        else:
            harness_config = HarnessConfig()

        # Flags only ever switch options on
        overrides = {
            "color": color or harness_config.color,
            "keep_artifacts": keep or harness_config.keep_artifacts,
            "silent": silent or harness_config.silent,
            "verbose": verbose or harness_config.verbose,
        }
        if suite is not None:
            overrides["suite"] = suite
        harness_config = HarnessConfig.model_validate(
            {**harness_config.model_dump(), **overrides}
        )
        suite_obj = load_suite(harness_config.suite)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    driver = SuiteDriver(suite_obj, harness_config)
    try:
        status = driver.run()
    except HarnessSetupError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(FATAL_STATUS)

    if harness_config.keep_artifacts and not harness_config.silent:
        typer.echo(f"Artifacts kept: {driver.artifacts.root}", err=True)

    raise typer.Exit(exit_status(status))


@app.command()
def init(
    dir: str = typer.Option(".", "--dir", help="Directory to write trapcheck.yaml in"),
):
    """Write an example harness config."""
    project_dir = Path(dir)
    if not project_dir.exists():
        project_dir.mkdir(parents=True, exist_ok=True)

    example = project_dir / "trapcheck.yaml"
    if example.exists():
        typer.echo(f"trapcheck.yaml already exists in {dir}, skipping.")
        return

    example.write_text("""\
suite: trapcheck.reference.suite:suite
color: false
silent: false
keep_artifacts: false
# artifact_dir: ${TMPDIR:-/tmp}/trapcheck
trapped_signals:
  - SIGABRT
""")
    typer.echo(f"Initialized harness config in {dir}:")
    typer.echo("  trapcheck.yaml   - example harness config")
