"""
Core synchronization engine for the note tree.
Reconciles scanned folder/file listings against the stored manual order.
"""
import logging
from pathlib import Path, PurePath
from typing import List, Optional, Sequence, Union

from .config import NEXT_INDEX_SEED, meta_file_path
from .models import ListingEntry, OrderMode, OrderNode
from .reorder import move_down, move_up
from .storage import MetaStore


# Configure logger
logger = logging.getLogger(__name__)

FolderPath = Union[str, PurePath, Sequence[str]]


def sync_folders(node: OrderNode, listing: Sequence[ListingEntry]) -> None:
    """
    Reconcile the child folders of a node with a folder listing.

    Each entry is tagged with its folder's order mode, and unordered
    folders get their own icon. Sibling folder order is left to the listing.

    Args:
        node: Parent folder node
        listing: Live folder entries for one level
    """
    for entry in listing:
        folder = node.get_folder([entry.label])
        entry.add_state(folder.order_mode.value)
        if not folder.is_ordered:
            entry.set_unordered_icon()

    # Remove folders that don't exist anymore
    node.remove_missing((entry.label for entry in listing), node.folders)


def sync_files(node: OrderNode, listing: List[ListingEntry]) -> None:
    """
    Reconcile the file indices of a node with a file listing.

    For an ordered folder the listing is sorted in place into the stored
    manual order, files seen for the first time are appended at the end,
    indices of vanished files are dropped and the remaining indices are
    renumbered to 0..count-1. Unordered folders are only tagged.

    Args:
        node: Folder node owning the files
        listing: Live file entries for the folder
    """
    for entry in listing:
        entry.add_state(node.order_mode.value)

    if not node.is_ordered:
        return

    next_index = NEXT_INDEX_SEED

    def index_of(entry: ListingEntry) -> int:
        nonlocal next_index
        index = node.files.get(entry.label)
        if index is None:
            index = next_index
            next_index += 1
            node.files[entry.label] = index
        return index

    listing.sort(key=index_of)

    # Remove files that don't exist anymore
    node.remove_missing((entry.label for entry in listing), node.files)

    for position, entry in enumerate(listing):
        node.files[entry.label] = position


def split_folder_path(folder_path: FolderPath) -> List[str]:
    """
    Split a folder path relative to the notes root into segments.

    Args:
        folder_path: "a/b" style string, path object, or ready-made segments

    Returns:
        List of folder names ([] for the root)
    """
    if isinstance(folder_path, (str, PurePath)):
        parts = PurePath(folder_path).parts
    else:
        parts = tuple(folder_path)

    return [part for part in parts if part not in ("", ".")]


class SyncEngine:
    """Ordering tree for one notes root, with its sidecar storage."""

    def __init__(self, notes_root: Path, store: Optional[MetaStore] = None):
        """
        Initialize the sync engine.

        Args:
            notes_root: Root folder of the notes
            store: Metadata store (defaults to the root's sidecar record)
        """
        self.notes_root = Path(notes_root)
        self.store = store if store is not None else MetaStore(meta_file_path(self.notes_root))
        self.tree = OrderNode()

    def node_for(self, folder_path: FolderPath = "") -> OrderNode:
        """Return the node for a folder, creating it if needed."""
        return self.tree.get_folder(split_folder_path(folder_path))

    def sync_folders(self, listing: Sequence[ListingEntry], folder_path: FolderPath = "") -> None:
        sync_folders(self.node_for(folder_path), listing)

    def sync_files(self, listing: List[ListingEntry], folder_path: FolderPath = "") -> None:
        sync_files(self.node_for(folder_path), listing)

    def move_up(self, name: str, folder_path: FolderPath = "") -> bool:
        return move_up(self.node_for(folder_path), name)

    def move_down(self, name: str, folder_path: FolderPath = "") -> bool:
        return move_down(self.node_for(folder_path), name)

    def rename_file(self, old_name: str, new_name: str, folder_path: FolderPath = "") -> bool:
        """
        Rename a file's order entry.

        The caller must only rename the file on disk when this returns True.
        """
        renamed = self.node_for(folder_path).rename_file(old_name, new_name)
        if not renamed:
            logger.warning(f"Cannot rename '{old_name}': no order entry in '{folder_path}'")
        return renamed

    def rename_folder(self, old_name: str, new_name: str, folder_path: FolderPath = "") -> bool:
        """
        Rename a child folder, keeping its subtree.

        The caller must only rename the folder on disk when this returns True.
        """
        renamed = self.node_for(folder_path).rename_folder(old_name, new_name)
        if not renamed:
            logger.warning(f"Cannot rename folder '{old_name}': not tracked in '{folder_path}'")
        return renamed

    def set_order_mode(self, mode: OrderMode, folder_path: FolderPath = "") -> None:
        """Switch a single folder between manual and scan order."""
        node = self.node_for(folder_path)
        if node.order_mode is not mode:
            logger.info(f"Folder '{folder_path}' is now {mode.value}")
        node.order_mode = mode

    def load(self) -> bool:
        """
        Replace the in-memory tree with the stored one.

        Returns:
            True if a stored tree was loaded; on failure the current tree is kept
        """
        root = self.store.load()
        if root is None:
            return False

        self.tree = root
        return True

    def save(self) -> bool:
        """Write the whole tree to storage. Failures are logged, not raised."""
        return self.store.save(self.tree)
