from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from rich import box
from rich.console import Console
from rich.table import Table


def _format_mb(value: Optional[int]) -> str:
    if not value:
        return "N/A"
    return f"{value / (1024 * 1024):.2f}"


def _format_cpu(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:.1f}"


def print_seed_result(result: Mapping[str, Any], console: Optional[Console] = None) -> None:
    """
    Render a seed run as a rich table.
    """
    console = console or Console()
    table = Table(title="Seed Result", box=box.ROUNDED)

    table.add_column("Inserted", justify="right", style="magenta")
    table.add_column("Batches", justify="right", style="blue")
    table.add_column("Batch Size", justify="right")
    table.add_column("Workers", justify="right")
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Throughput (rows/s)", justify="right", style="bold green")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")
    table.add_column("CPU %", justify="right", style="red")

    table.add_row(
        f"{result.get('inserted', 0):,}",
        str(result.get("batches", 0)),
        str(result.get("batch_size", "")),
        str(result.get("concurrency", "")),
        f"{result.get('duration_seconds', 0.0):.1f}",
        f"{result.get('throughput_rows_per_sec', 0.0):,.2f}",
        _format_mb(result.get("peak_rss_bytes")),
        _format_cpu(result.get("cpu_percent")),
    )
    console.print(table)


def print_reset_result(result: Mapping[str, Any], console: Optional[Console] = None) -> None:
    """
    Render a problems-flag reset as a rich table.
    """
    console = console or Console()
    table = Table(title="Problems Flag Reset", box=box.ROUNDED)

    table.add_column("Users With Problems", justify="right", style="magenta")
    table.add_column("Attempts", justify="right", style="blue")
    table.add_column("Duration (s)", justify="right", style="green")

    table.add_row(
        f"{result.get('reset_count', 0):,}",
        str(result.get("attempts", 1)),
        f"{result.get('duration_seconds', 0.0):.2f}",
    )
    console.print(table)


def print_store_stats(stats: Dict[str, int], console: Optional[Console] = None) -> None:
    console = console or Console()
    table = Table(title="Users Table", box=box.ROUNDED)
    table.add_column("Users", justify="right", style="magenta")
    table.add_column("With Problems", justify="right", style="red")
    table.add_row(f"{stats['users']:,}", f"{stats['flagged']:,}")
    console.print(table)


__all__ = ["print_reset_result", "print_seed_result", "print_store_stats"]
