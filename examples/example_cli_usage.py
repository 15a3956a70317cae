#!/usr/bin/env python3
"""Example CLI Usage Script - Demonstrates all cgm-days commands.

This script shows how to use the cgm-days tool from Python by calling it as a subprocess.

Usage:
    python examples/example_cli_usage.py path/to/clarity_export.csv

    # Or with a different clinical day boundary
    python examples/example_cli_usage.py path/to/clarity_export.csv --wake-up 06:30
"""

import subprocess
import sys
from pathlib import Path
from typing import List
import typer
from rich.console import Console
from rich.panel import Panel

app = typer.Typer()
console = Console()


def run_cli_command(args: List[str], description: str = "") -> subprocess.CompletedProcess:
    """Run a cgm-days command and display results.

    Args:
        args: Command arguments for cgm-days
        description: Human-readable description of what this command does

    Returns:
        CompletedProcess with stdout/stderr
    """
    if description:
        console.print(f"\n[bold cyan]Example: {description}[/bold cyan]")

    # Run as module
    cmd = [sys.executable, "-m", "cgm_days.cgm_cli"] + args
    cmd_str = " ".join(args)
    console.print(f"[dim]$ cgm-days {cmd_str}[/dim]\n")

    result = subprocess.run(cmd, capture_output=True, text=True)

    if result.stdout:
        console.print(result.stdout)

    if result.returncode != 0 and result.stderr:
        console.print(f"[red]{result.stderr}[/red]")

    return result


@app.command()
def main(
    input_file: Path = typer.Argument(..., help="Dexcom Clarity CSV export"),
    wake_up: str = typer.Option("04:00:00", "--wake-up", "-w", help="Clinical day boundary"),
) -> None:
    """Run through all cgm-days command examples."""

    console.print(Panel.fit(
        "[bold]CGM Days CLI Tool - Usage Examples[/bold]\n\n"
        "Commands are executed via subprocess to show real-world usage.",
        border_style="cyan"
    ))

    if not input_file.exists():
        console.print(f"\n[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    console.print("\n" + "=" * 70)
    console.print("[bold green]1. FORMAT DETECTION[/bold green]")
    console.print("=" * 70)

    run_cli_command(["detect", str(input_file), "--verbose"], "Detect format with detailed information")

    console.print("\n" + "=" * 70)
    console.print("[bold green]2. ROW CLASSIFICATION[/bold green]")
    console.print("=" * 70)

    run_cli_command(["parse", str(input_file), "--preview"], "Classify rows and preview typed records")

    console.print("\n" + "=" * 70)
    console.print("[bold green]3. CLINICAL DAYS[/bold green]")
    console.print("=" * 70)

    run_cli_command(["days", str(input_file), "--wake-up", wake_up], "Group EGV readings by clinical day")
    run_cli_command(
        ["days", str(input_file), "--wake-up", wake_up, "--all-events"],
        "Group every timestamped record by clinical day"
    )

    console.print("\n" + "=" * 70)
    console.print("[bold green]4. EXPORT LAYOUT[/bold green]")
    console.print("=" * 70)

    run_cli_command(["info"], "Show the Dexcom export layout")

    console.print("\n[bold cyan]For help on any command:[/bold cyan]")
    console.print("  cgm-days <command> --help")


if __name__ == "__main__":
    app()
