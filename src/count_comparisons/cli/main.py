# count_comparisons/cli/main.py
from __future__ import annotations
import typer

from count_comparisons.cli.compare import compare_cmd

app = typer.Typer(
    help="Compare a table's or query's row count to a number", no_args_is_help=True
)


@app.callback()
def main() -> None:
    """Row count comparisons that never run COUNT(*)."""


app.command("compare")(compare_cmd)


def run():
    app()


if __name__ == "__main__":
    run()
