"""
Utility for user-visible messages.
"""
import click


def show_warning(message: str) -> None:
    """
    Show a warning to the user on stderr.

    Args:
        message: Message to display to user
    """
    click.secho(f"Warning: {message}", fg="yellow", err=True)
