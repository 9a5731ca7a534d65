"""
AABForge CLI.

Command-line interface for building signed bundles and inspecting signing
configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .core.config import get_config
from .core.exceptions import AABForgeError, BundleStageError, ToolInvocationError
from .core.logging import setup_logging

app = typer.Typer(
    name="aabforge",
    help="Build signed Android App Bundles from APKs",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from . import __version__
        console.print(f"AABForge v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """AABForge: APK to signed AAB."""
    pass


def _report_failure(error: AABForgeError) -> None:
    if isinstance(error, BundleStageError):
        err_console.print(f"[bold red]✗ {error.stage} failed[/bold red]")
        cause = error.cause
        if isinstance(cause, ToolInvocationError) and cause.stderr:
            # Tool diagnostics are shown verbatim
            err_console.print(cause.stderr, markup=False, highlight=False)
        else:
            err_console.print(str(cause or error), markup=False, highlight=False)
    else:
        err_console.print(f"[bold red]✗ {error}[/bold red]")


@app.command()
def bundle(
    project_dir: Path = typer.Argument(
        Path("."),
        help="Project directory containing the project file",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    profile: str = typer.Option(
        "release",
        "--profile",
        "-p",
        help="Build profile (dev, release or a custom profile)",
    ),
    target_dir: Optional[Path] = typer.Option(
        None,
        "--target-dir",
        help="Build output root",
    ),
    apk: Optional[Path] = typer.Option(
        None,
        "--apk",
        help="APK to convert (defaults to the profile's package output)",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging",
    ),
) -> None:
    """Convert an APK into a signed app bundle."""
    from .bundle import build_bundle
    from .models import BuildProfile

    config = get_config()
    if verbose:
        config = config.model_copy(update={"log_level": "DEBUG"})
    setup_logging(config)

    build_profile = BuildProfile.parse(profile)
    try:
        run = build_bundle(project_dir, build_profile, target_dir=target_dir, apk_path=apk, config=config)
    except AABForgeError as e:
        _report_failure(e)
        raise typer.Exit(1)

    table = Table(title="Bundle Stages")
    table.add_column("Stage", style="cyan")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    for stage in run.stages:
        table.add_row(stage.stage_name, stage.status.value, f"{stage.duration_seconds:.2f}s")
    console.print(table)
    console.print(f"\n[bold green]✓ Signed bundle:[/bold green] {run.signed_bundle}")


@app.command("resolve-key")
def resolve_key(
    project_dir: Path = typer.Argument(
        Path("."),
        help="Project directory containing the project file",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    profile: str = typer.Option("release", "--profile", "-p", help="Build profile"),
    allow_debug: bool = typer.Option(
        False,
        "--allow-debug",
        help="Allow the default password and the generated debug keystore (dev profile only)",
    ),
) -> None:
    """Show which keystore a profile would be signed with."""
    from .models import BuildProfile, ProjectManifest
    from .signing import DebugKeyProvider, KeystoreResolver
    from .toolchain import Toolchain

    config = get_config()
    setup_logging(config)
    build_profile = BuildProfile.parse(profile)
    if allow_debug and not build_profile.is_dev:
        err_console.print(
            f"[yellow]--allow-debug only applies to the dev profile, ignored for '{build_profile}'[/yellow]"
        )
        allow_debug = False

    try:
        manifest = ProjectManifest.from_toml(project_dir / config.bundle.manifest_file)
        debug_keys = None
        if allow_debug:
            debug_keys = DebugKeyProvider(Toolchain.from_env(tools=config.tools).keytool)
        resolver = KeystoreResolver(project_dir, manifest.signing, debug_keys=debug_keys)
        key = resolver.resolve(build_profile, allow_debug_fallback=allow_debug)
    except AABForgeError as e:
        _report_failure(e)
        raise typer.Exit(1)

    table = Table(title=f"Signing key for '{build_profile}'")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Keystore", str(key.path))
    table.add_row("Alias", key.alias or "[dim]keystore default[/dim]")
    table.add_row("Source", key.source.value)
    console.print(table)


@app.command()
def config() -> None:
    """Show the effective configuration."""
    cfg = get_config()

    table = Table(title="Current Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", cfg.log_level)
    table.add_row("JAVA_HOME", str(cfg.tools.java_home or "-"))
    table.add_row("ANDROID_HOME", str(cfg.tools.android_home or "-"))
    table.add_row("Build Tools", cfg.tools.build_tools_version)
    table.add_row("Platform", f"android-{cfg.tools.platform}")
    table.add_row("Payload Dir", str(cfg.tools.payload_dir or "package data"))
    table.add_row("Target Dir", str(cfg.bundle.target_dir))
    table.add_row("Bundle Extension", cfg.bundle.extension)

    console.print(table)

    console.print("\n[dim]Configure via environment variables:[/dim]")
    console.print("  AABFORGE_LOG_LEVEL, AABFORGE_TARGET_DIR, AABFORGE_PAYLOAD_DIR")
    console.print("  AABFORGE_<PROFILE>_STORE_PATH, AABFORGE_<PROFILE>_STORE_PASSWORD")
    console.print("  AABFORGE_<PROFILE>_KEY_ALIAS, AABFORGE_<PROFILE>_KEY_PASSWORD")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
