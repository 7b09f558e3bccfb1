"""Main Typer CLI application for calibration capture."""

import typer

app = typer.Typer(
    help="Interactive camera calibration capture from a live video stream",
    no_args_is_help=True,
)


@app.callback()
def main() -> None:
    """Interactive camera calibration capture."""


def _register_commands() -> None:
    """
    Import command modules to register commands with the app.

    Commands use the @app.command() decorator and register themselves when
    their module is imported.
    """
    from calib_capture.cli import capture

    # Avoid "imported but unused" warnings by explicitly using the module
    _ = capture


_register_commands()


if __name__ == "__main__":
    app()
