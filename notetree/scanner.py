"""
Folder scanning for the command line tool.
Produces listing entries for one folder level; the engine only annotates them.
"""
import logging
from pathlib import Path, PurePath
from typing import List, Tuple

from .config import META_DIR_NAME, NOTE_FILE_EXTENSION


logger = logging.getLogger(__name__)


class NoteEntry:
    """A scanned note or folder, as handed to the sync engine."""

    def __init__(self, label: str, folder_path: str, is_folder: bool = False):
        self.label: str = label
        self.folder_path: str = folder_path
        self.is_folder: bool = is_folder
        self.states: List[str] = []
        self.icon: str = "folder" if is_folder else "note"

    def __repr__(self) -> str:
        return f"NoteEntry({self.relative_path()!r}, states={self.states})"

    def add_state(self, tag: str) -> None:
        self.states.append(tag)

    def set_unordered_icon(self) -> None:
        self.icon = "folder-unordered"

    def relative_path(self) -> str:
        """Path of the entry relative to the notes root."""
        return str(PurePath(self.folder_path, self.label))

    def full_path(self, notes_root: Path) -> Path:
        return Path(notes_root) / self.folder_path / self.label


def scan_level(
    notes_root: Path,
    folder_path: str = "",
    extension: str = NOTE_FILE_EXTENSION
) -> Tuple[List[NoteEntry], List[NoteEntry]]:
    """
    List the subfolders and notes directly inside one folder.

    Hidden entries (including the metadata folder) are skipped. Both lists
    come back in alphabetical order.

    Args:
        notes_root: Root folder of the notes
        folder_path: Folder to scan, relative to the notes root
        extension: Extension identifying note files

    Returns:
        Tuple of (folders, notes)
    """
    directory = Path(notes_root) / folder_path
    if not directory.is_dir():
        raise FileNotFoundError(f"Notes folder not found: {directory}")

    folders = []
    notes = []

    for child in sorted(directory.iterdir(), key=lambda p: p.name.lower()):
        if child.name.startswith(".") or child.name == META_DIR_NAME:
            continue

        if child.is_dir():
            folders.append(NoteEntry(child.name, folder_path, is_folder=True))
        elif child.is_file() and child.suffix == extension:
            notes.append(NoteEntry(child.name, folder_path))

    logger.debug(f"Scanned '{folder_path}': {len(folders)} folders, {len(notes)} notes")
    return folders, notes
