"""
Models for the note tree ordering service.
Contains the OrderNode tree and the listing entry contract.
"""
import logging
from enum import Enum
from typing import Dict, Iterable, Optional, Protocol, Sequence


logger = logging.getLogger(__name__)


class OrderMode(Enum):
    """Whether the direct file children of a folder are manually sequenced."""

    ORDERED = "ordered"
    UNORDERED = "unordered"


class ListingEntry(Protocol):
    """One folder or file entry produced by a scan of a single folder level."""

    label: str
    folder_path: str

    def add_state(self, tag: str) -> None:
        ...

    def set_unordered_icon(self) -> None:
        ...


class OrderNode:
    """Represents a folder in the ordering tree."""

    def __init__(self, name: str = "", order_mode: OrderMode = OrderMode.ORDERED):
        self.name: str = name
        self.order_mode: OrderMode = order_mode
        self.folders: Dict[str, "OrderNode"] = {}
        self.files: Dict[str, int] = {}

    def __repr__(self) -> str:
        return (
            f"OrderNode(name={self.name!r}, order_mode={self.order_mode.value}, "
            f"folders={len(self.folders)}, files={len(self.files)})"
        )

    @property
    def is_ordered(self) -> bool:
        return self.order_mode is OrderMode.ORDERED

    def get_folder(self, segments: Sequence[str]) -> "OrderNode":
        """
        Find the node at a relative path, creating missing nodes on the way.

        Args:
            segments: Folder names from this node down to the target

        Returns:
            Node at the given path (this node for an empty path)
        """
        if not segments:
            return self

        folder_name = segments[0]
        child = self.folders.get(folder_name)
        if child is None:
            child = OrderNode(folder_name)
            self.folders[folder_name] = child

        return child.get_folder(segments[1:])

    def remove_missing(self, live_names: Iterable[str], mapping: Dict) -> None:
        """
        Delete every key of mapping that is not among the live names.

        A failure leaves the mapping as it was; the prune is retried on the
        next sync pass.

        Args:
            live_names: Names present in the current listing
            mapping: Either self.folders or self.files
        """
        try:
            seen = set(live_names)
            stale = [key for key in mapping if key not in seen]
            for key in stale:
                del mapping[key]

            if stale:
                logger.debug(f"Pruned {len(stale)} stale entries under '{self.name}'")

        except Exception as e:
            logger.error(f"Failed to prune stale entries under '{self.name}': {e}")

    def rename_file(self, old_name: str, new_name: str) -> bool:
        """
        Move the order index of a file to a new name.

        Returns:
            False if old_name has no index, True otherwise
        """
        index: Optional[int] = self.files.get(old_name)
        if index is None:
            return False

        del self.files[old_name]
        self.files[new_name] = index
        return True

    def rename_folder(self, old_name: str, new_name: str) -> bool:
        """
        Move a child node, with its whole subtree, to a new name.

        Returns:
            False if old_name has no node, True otherwise
        """
        folder = self.folders.get(old_name)
        if folder is None:
            return False

        folder.name = new_name
        del self.folders[old_name]
        self.folders[new_name] = folder
        return True
