"""
Persistence of the ordering tree to the sidecar metadata record.

Record schema (one JSON document per notes root):

    {
      "version": 1,
      "name": str,
      "isOrdered": bool,          # true when absent
      "files": {name: int},
      "folders": {name: <same schema, without "version">}
    }
"""
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .config import META_SCHEMA_VERSION
from .models import OrderMode, OrderNode
from .utils.prompt import show_warning


logger = logging.getLogger(__name__)

LOAD_WARNING = "Failed to load notes meta information.\nNote ordering may be lost."


class MetaFormatError(ValueError):
    """Raised when a metadata record does not match the schema."""


def node_to_record(node: OrderNode) -> Dict[str, Any]:
    """Serialize a node and its subtree."""
    return {
        "name": node.name,
        "isOrdered": node.is_ordered,
        "files": dict(node.files),
        "folders": {
            key: node_to_record(child) for key, child in node.folders.items()
        },
    }


def node_from_record(record: Any, name: Optional[str] = None) -> OrderNode:
    """
    Build a node and its subtree from a record.

    Args:
        record: Decoded JSON object
        name: Key the record was stored under, used when the record has no name

    Returns:
        New OrderNode

    Raises:
        MetaFormatError: If the record does not match the schema
    """
    if not isinstance(record, dict):
        raise MetaFormatError(f"Expected an object for folder '{name}', got {type(record).__name__}")

    node_name = record.get("name", name)
    if node_name is None:
        node_name = ""
    if not isinstance(node_name, str):
        raise MetaFormatError(f"Invalid folder name: {node_name!r}")

    is_ordered = record.get("isOrdered", True)
    if not isinstance(is_ordered, bool):
        raise MetaFormatError(f"Invalid isOrdered flag for folder '{node_name}': {is_ordered!r}")

    node = OrderNode(node_name, OrderMode.ORDERED if is_ordered else OrderMode.UNORDERED)

    files = record.get("files")
    if files is None:
        files = {}
    if not isinstance(files, dict):
        raise MetaFormatError(f"Invalid files mapping for folder '{node_name}'")
    for file_name, index in files.items():
        # bool is an int subclass but never a valid index
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise MetaFormatError(f"Invalid order index for '{file_name}': {index!r}")
        node.files[file_name] = index

    folders = record.get("folders")
    if folders is None:
        folders = {}
    if not isinstance(folders, dict):
        raise MetaFormatError(f"Invalid folders mapping for folder '{node_name}'")
    for key, child_record in folders.items():
        node.folders[key] = node_from_record(child_record, key)

    return node


class MetaStore:
    """Reads and writes the sidecar record for one notes root."""

    def __init__(self, meta_path: Path, warn: Callable[[str], None] = show_warning):
        """
        Initialize the store.

        Args:
            meta_path: Location of the sidecar record
            warn: Callback used to tell the user that ordering could not be loaded
        """
        self.meta_path = Path(meta_path)
        self.warn = warn

    def load(self) -> Optional[OrderNode]:
        """
        Read the sidecar record.

        Returns:
            Root node of the stored tree, or None when there is nothing
            usable to load
        """
        if not self.meta_path.is_file():
            logger.debug(f"No meta record at {self.meta_path}")
            return None

        try:
            with open(self.meta_path, "r", encoding="utf-8") as f:
                record = json.load(f)

            if isinstance(record, dict):
                version = record.get("version", META_SCHEMA_VERSION)
                if version != META_SCHEMA_VERSION:
                    raise MetaFormatError(f"Unsupported meta record version: {version!r}")

            root = node_from_record(record)

        except (OSError, ValueError) as e:
            logger.error(f"Failed to load meta record {self.meta_path}: {e}")
            self.warn(LOAD_WARNING)
            return None

        logger.info(f"Loaded meta record from {self.meta_path}")
        return root

    def save(self, root: OrderNode) -> bool:
        """
        Overwrite the sidecar record with the whole tree.

        Returns:
            True if the record was written
        """
        record = {"version": META_SCHEMA_VERSION}
        record.update(node_to_record(root))

        try:
            self._ensure_meta_dir()
            with open(self.meta_path, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)

        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save meta record {self.meta_path}: {e}")
            return False

        logger.debug(f"Saved meta record to {self.meta_path}")
        return True

    def _ensure_meta_dir(self) -> None:
        meta_dir = self.meta_path.parent

        # A plain file squatting on the folder name is replaced
        if meta_dir.exists() and not meta_dir.is_dir():
            logger.warning(f"Replacing file {meta_dir} with the meta folder")
            meta_dir.unlink()

        meta_dir.mkdir(parents=True, exist_ok=True)
