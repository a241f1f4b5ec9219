"""
CLI entry point for the note tree ordering service.
Scans the notes folder, keeps the manual order in sync and applies user commands.
"""
import logging
import sys
from pathlib import Path, PurePath
from typing import List, Optional, Tuple

import click

from .config import DEFAULT_LOG_LEVEL, LOG_FORMAT, NOTE_FILE_EXTENSION
from .models import OrderMode
from .scanner import NoteEntry, scan_level
from .sync import SyncEngine


logger = logging.getLogger(__name__)

LOG_LEVELS = ['debug', 'info', 'warning', 'error', 'critical']


class CliState:
    """Objects shared by all commands of one invocation."""

    def __init__(self, engine: SyncEngine, extension: str):
        self.engine = engine
        self.extension = extension


def setup_logging(log_level: str, log_file: Optional[Path] = None) -> None:
    """Configure logging with the specified level."""
    level = getattr(logging, log_level.upper(), logging.WARNING)
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    logger.debug(f"Logging initialized at level {log_level}")


def with_extension(name: str, extension: str) -> str:
    """Return name with the note extension, adding it when missing."""
    return name if name.endswith(extension) else name + extension


def split_path(path: str) -> Tuple[str, str]:
    """Split a root-relative path into (parent folder, name)."""
    pure = PurePath(path)
    if not pure.name:
        raise click.BadParameter(f"Invalid path: '{path}'")
    parent = str(pure.parent)
    return ("" if parent == "." else parent), pure.name


def check_new_name(new_name: str) -> None:
    if not new_name or PurePath(new_name).name != new_name or new_name in (".", ".."):
        raise click.BadParameter(f"Invalid name: '{new_name}'")


def refresh_level(state: CliState, folder_path: str) -> Tuple[List[NoteEntry], List[NoteEntry]]:
    """
    Scan one folder and reconcile it with the ordering tree.

    Returns:
        Tuple of (folders, notes), notes in display order
    """
    try:
        folders, notes = scan_level(state.engine.notes_root, folder_path, state.extension)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))

    state.engine.sync_folders(folders, folder_path)
    state.engine.sync_files(notes, folder_path)
    return folders, notes


def render_tree(state: CliState, folder_path: str = "", depth: int = 0) -> List[str]:
    """Refresh a folder and all its subfolders, returning display lines."""
    folders, notes = refresh_level(state, folder_path)
    indent = "  " * depth
    lines = []

    for entry in folders:
        marker = " [unordered]" if entry.icon == "folder-unordered" else ""
        lines.append(f"{indent}{entry.label}/{marker}")
        lines.extend(render_tree(state, entry.relative_path(), depth + 1))

    for entry in notes:
        lines.append(f"{indent}{entry.label}")

    return lines


def find_note(state: CliState, note: str) -> Tuple[str, str]:
    """Resolve a note argument to (folder path, file name) after a refresh."""
    folder_path, name = split_path(with_extension(note, state.extension))
    _, notes = refresh_level(state, folder_path)
    if name not in [entry.label for entry in notes]:
        raise click.ClickException(f"Note not found: {note}")
    return folder_path, name


@click.group()
@click.option(
    '--root',
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default='.',
    envvar='NOTETREE_ROOT',
    show_default=True,
    help='Root folder of the notes'
)
@click.option(
    '--ext',
    'extension',
    default=NOTE_FILE_EXTENSION,
    show_default=True,
    help='File extension of notes'
)
@click.option(
    '--log-level',
    type=click.Choice(LOG_LEVELS),
    default=DEFAULT_LOG_LEVEL,
    show_default=True,
    help='Set the logging level'
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, path_type=Path),
    help='Also write log messages to this file'
)
@click.pass_context
def main(ctx: click.Context, root: Path, extension: str, log_level: str, log_file: Optional[Path]):
    """Keep a manual order for the notes under ROOT."""
    setup_logging(log_level, log_file)

    engine = SyncEngine(root)
    engine.load()
    ctx.obj = CliState(engine, extension)


@main.command()
@click.argument('folder', default='')
@click.pass_obj
def show(state: CliState, folder: str):
    """Refresh and print the note tree."""
    for line in render_tree(state, folder):
        click.echo(line)
    state.engine.save()


@main.command('move-up')
@click.argument('note')
@click.pass_obj
def move_up_cmd(state: CliState, note: str):
    """Move NOTE one position up within its folder."""
    folder_path, name = find_note(state, note)
    if not state.engine.move_up(name, folder_path):
        click.echo(f"'{name}' was not moved")
    state.engine.save()


@main.command('move-down')
@click.argument('note')
@click.pass_obj
def move_down_cmd(state: CliState, note: str):
    """Move NOTE one position down within its folder."""
    folder_path, name = find_note(state, note)
    if not state.engine.move_down(name, folder_path):
        click.echo(f"'{name}' was not moved")
    state.engine.save()


@main.command('rename-note')
@click.argument('note')
@click.argument('new_name')
@click.pass_obj
def rename_note(state: CliState, note: str, new_name: str):
    """Rename NOTE to NEW_NAME, keeping its position."""
    check_new_name(new_name)
    folder_path, name = find_note(state, note)
    new_file_name = with_extension(new_name, state.extension)
    if new_file_name == name:
        return

    folder = state.engine.notes_root / folder_path
    new_path = folder / new_file_name
    if new_path.exists():
        raise click.ClickException(f"'{new_file_name}' already exists.")

    if not state.engine.rename_file(name, new_file_name, folder_path):
        raise click.ClickException(f"Failed to rename '{name}' in the note tree.")

    try:
        (folder / name).rename(new_path)
    except OSError as e:
        state.engine.rename_file(new_file_name, name, folder_path)
        raise click.ClickException(f"Failed to rename '{name}': {e}")

    state.engine.save()
    click.echo(f"Renamed '{name}' to '{new_file_name}'")


@main.command('rename-folder')
@click.argument('folder')
@click.argument('new_name')
@click.pass_obj
def rename_folder(state: CliState, folder: str, new_name: str):
    """Rename FOLDER to NEW_NAME, keeping the order of its contents."""
    check_new_name(new_name)
    parent_path, name = split_path(folder)
    if new_name == name:
        return

    folders, _ = refresh_level(state, parent_path)
    if name not in [entry.label for entry in folders]:
        raise click.ClickException(f"Folder not found: {folder}")

    parent = state.engine.notes_root / parent_path
    new_path = parent / new_name
    if new_path.exists():
        raise click.ClickException(f"'{new_name}' already exists.")

    if not state.engine.rename_folder(name, new_name, parent_path):
        raise click.ClickException(f"Failed to rename folder '{name}' in the note tree.")

    try:
        (parent / name).rename(new_path)
    except OSError as e:
        state.engine.rename_folder(new_name, name, parent_path)
        raise click.ClickException(f"Failed to rename folder '{name}': {e}")

    state.engine.save()
    click.echo(f"Renamed folder '{name}' to '{new_name}'")


@main.command('set-mode')
@click.argument('folder')
@click.argument('mode', type=click.Choice([mode.value for mode in OrderMode]))
@click.pass_obj
def set_mode(state: CliState, folder: str, mode: str):
    """Make FOLDER keep a manual order (ordered) or follow scan order (unordered)."""
    folder_path = "" if folder in ("", ".") else folder
    if not (state.engine.notes_root / folder_path).is_dir():
        raise click.ClickException(f"Folder not found: {folder}")

    state.engine.set_order_mode(OrderMode(mode), folder_path)
    state.engine.save()
    click.echo(f"'{folder}' is now {mode}")


if __name__ == "__main__":
    main()
