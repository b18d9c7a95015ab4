"""Colored terminal messages shared by the setup steps."""

from rich.console import Console
from rich.markup import escape


def log(console: Console, message: str):
    console.print(f"\n[bold green]==> {escape(message)}[/bold green]")


def warn(console: Console, message: str):
    console.print(f"\n[bold yellow]!! {escape(message)}[/bold yellow]")


def error(console: Console, message: str):
    console.print(f"\n[bold red]ERROR: {escape(message)}[/bold red]")


def plain(console: Console, message: str = ""):
    console.print(escape(message))
