"""Colored console output."""

from __future__ import annotations

from typing import Any

import typer


def blue(s: Any) -> str:
    return typer.style(str(s), fg=typer.colors.BLUE)


def red(s: Any) -> str:
    return typer.style(str(s), fg=typer.colors.RED)


def green(s: Any) -> str:
    return typer.style(str(s), fg=typer.colors.GREEN)


def amber(s: Any) -> str:
    return typer.style(str(s), fg=typer.colors.YELLOW)


def bluelog(s: Any) -> None:
    typer.echo(blue(s))


def redlog(s: Any) -> None:
    typer.echo(red(s))


def greenlog(s: Any) -> None:
    typer.echo(green(s))


def amberlog(s: Any) -> None:
    typer.echo(amber(s))


def banner(title: str, width: int = 44) -> None:
    """Print *title* between two amber rules, highlighted on green."""
    amberlog("=" * width)
    typer.echo(typer.style(title, fg=typer.colors.BLUE, bg=typer.colors.GREEN))
    amberlog("=" * width)


def counts_line(total: int, passed: int, failed: int) -> str:
    """Render ``total [T] pass [P] fail [F]`` with each count colored."""
    return (
        blue("total [") + amber(total) + blue("] pass [") + green(passed)
        + blue("] fail [") + red(failed) + blue("]")
    )
