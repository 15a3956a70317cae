#!/usr/bin/env python3
"""CGM Days CLI Tool - Command-line interface for clinical day grouping.

This tool provides access to the parser and day bucketer:
- Format detection
- Row classification with per-event-type counts
- Clinical day grouping with glucose band counts

Can be used as:
- Installed command: cgm-days <command>
- Python module: python -m cgm_days.cgm_cli <command>
- Direct script: python scripts/cgm_days_cli.py <command>
"""

from datetime import time
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from cgm_days.record_parser import RecordParser
from cgm_days.day_bucketer import DayBucketer
from cgm_days.records import DexcomRecord, UnknownRecord, RECORD_CLASSES
from cgm_days.formats.dexcom import DEXCOM_SCHEMA, DEXCOM_TIMESTAMP_FORMAT
from cgm_days.interface.cgm_interface import (
    UnknownFormatError,
    MalformedDataError,
    ClassificationError,
    DEFAULT_WAKE_UP_TIME,
    GLUCOSE_LOW_THRESHOLD,
    GLUCOSE_HIGH_THRESHOLD,
    GLUCOSE_VERY_HIGH_THRESHOLD,
)

app = typer.Typer(
    name="cgm-days",
    help="CGM Days CLI - Classify Dexcom exports and group readings by clinical day",
    add_completion=False,
)
console = Console()

# Band name, style
GLUCOSE_BANDS = [
    ("Low", "red"),
    ("In Range", "green"),
    ("High", "yellow"),
    ("Very High", "magenta"),
]


# ===== Format Detection & Parsing Commands =====

@app.command()
def detect(
    input_file: Path = typer.Argument(..., help="Input CSV file to detect format"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed information"),
) -> None:
    """Detect the format of a CGM export file."""
    try:
        if not input_file.exists():
            console.print(f"[red]Error: File not found: {input_file}[/red]")
            raise typer.Exit(1)

        with open(input_file, 'rb') as f:
            raw_data = f.read()

        text_data = RecordParser.decode_raw_data(raw_data)
        detected_format = RecordParser.detect_format(text_data)

        console.print(f"\n[green]✓[/green] Detected format: [bold]{detected_format.value}[/bold]")

        if verbose:
            console.print(f"\nFile: {input_file}")
            console.print(f"Size: {len(raw_data)} bytes")
            console.print(f"Format: {detected_format.name}")

    except UnknownFormatError as e:
        console.print(f"[red]✗ Unknown format: {e}[/red]")
        raise typer.Exit(1)
    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def parse(
    input_file: Path = typer.Argument(..., help="Input CSV file to classify"),
    show_preview: bool = typer.Option(False, "--preview", "-p", help="Show the first classified records"),
) -> None:
    """Classify every row of an export and show counts per event type."""
    records = _load_records(input_file)

    console.print(f"\n[green]✓[/green] Classified {len(records)} rows")

    table = Table(title="Event Types")
    table.add_column("Event Type", style="cyan")
    table.add_column("Rows", justify="right")
    for event_type, count in RecordParser.count_event_types(records).items():
        table.add_row(event_type, f"{count:,}")
    console.print(table)

    if show_preview:
        console.print("\n[bold]Record Preview:[/bold]")
        for record in records[:10]:
            console.print(record)


@app.command()
def days(
    input_file: Path = typer.Argument(..., help="Input CSV file to group"),
    wake_up: str = typer.Option(
        DEFAULT_WAKE_UP_TIME.isoformat(),
        "--wake-up",
        "-w",
        envvar="CGM_DAYS_WAKE_UP",
        help="Time of day a clinical day starts (HH:MM[:SS])",
    ),
    all_events: bool = typer.Option(False, "--all-events", help="Group insulin, carbs and calibrations too"),
) -> None:
    """Group readings into clinical days and show counts per glucose band."""
    wake_up_time = _parse_wake_up(wake_up)
    records = _load_records(input_file)

    bucketer = DayBucketer(wake_up_time=wake_up_time)
    if all_events:
        groups = bucketer.group_records(records)
    else:
        groups = bucketer.group_glucose_readings(records)

    console.print(
        f"\n[green]✓[/green] {len(groups)} clinical day(s), day boundary at {wake_up_time.isoformat()}"
    )

    table = Table(title="Clinical Days")
    table.add_column("Day", style="cyan")
    table.add_column("Records", justify="right")
    for band, style in GLUCOSE_BANDS:
        table.add_column(band, justify="right", style=style)

    for day, day_records in groups.items():
        band_counts = _band_counts(day_records)
        table.add_row(
            day.isoformat(),
            f"{len(day_records):,}",
            *(f"{band_counts[band]:,}" for band, _ in GLUCOSE_BANDS),
        )
    console.print(table)


@app.command()
def info() -> None:
    """Show the Dexcom export layout and default settings."""
    console.print("\n[bold]Dexcom Clarity Export Layout[/bold]")

    table = Table()
    table.add_column("Field", justify="right")
    table.add_column("Column", style="cyan")
    table.add_column("Type")
    table.add_column("Unit")
    for position, column in enumerate(DEXCOM_SCHEMA.columns):
        table.add_row(str(position), column["name"], str(column["dtype"]), column.get("unit", ""))
    console.print(table)

    event_table = Table(title="Event Types")
    event_table.add_column("Event Type", style="cyan")
    event_table.add_column("Record")
    for event_type, record_class in RECORD_CLASSES.items():
        event_table.add_row(event_type.value, record_class.__name__)
    event_table.add_row("(anything else)", UnknownRecord.__name__)
    console.print(event_table)

    console.print(f"\nTimestamp format: {DEXCOM_TIMESTAMP_FORMAT}")
    console.print(f"Default wake-up time: {DEFAULT_WAKE_UP_TIME.isoformat()}")
    console.print(
        f"Glucose bands (mg/dL): low < {GLUCOSE_LOW_THRESHOLD}, "
        f"in range {GLUCOSE_LOW_THRESHOLD}-{GLUCOSE_HIGH_THRESHOLD}, "
        f"high {GLUCOSE_HIGH_THRESHOLD}-{GLUCOSE_VERY_HIGH_THRESHOLD}, "
        f"very high > {GLUCOSE_VERY_HIGH_THRESHOLD}"
    )


# ===== Helper Functions =====

def _load_records(input_file: Path) -> List[DexcomRecord]:
    """Parse a file, turning parser errors into a red message and exit status 1."""
    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        with console.status(f"[bold green]Parsing {input_file.name}..."):
            return RecordParser.parse_file(input_file)
    except ClassificationError as e:
        console.print(f"[red]✗ Classification error: {e}[/red]")
        raise typer.Exit(1)
    except (UnknownFormatError, MalformedDataError) as e:
        console.print(f"[red]✗ Parse error: {e}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(1)


def _parse_wake_up(value: str) -> time:
    try:
        return time.fromisoformat(value)
    except ValueError:
        console.print(f"[red]✗ Invalid wake-up time: {value!r} (expected HH:MM[:SS])[/red]")
        raise typer.Exit(1)


def glucose_band(glucose_value: int) -> str:
    """Name of the presentation band a glucose value falls into."""
    if glucose_value < GLUCOSE_LOW_THRESHOLD:
        return "Low"
    if glucose_value <= GLUCOSE_HIGH_THRESHOLD:
        return "In Range"
    if glucose_value <= GLUCOSE_VERY_HIGH_THRESHOLD:
        return "High"
    return "Very High"


def _band_counts(records: List[DexcomRecord]) -> dict:
    counts = {band: 0 for band, _ in GLUCOSE_BANDS}
    for record in records:
        glucose_value: Optional[int] = record.get_glucose_value()
        if glucose_value is not None:
            counts[glucose_band(glucose_value)] += 1
    return counts


# ===== Main Entry Point =====

def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
