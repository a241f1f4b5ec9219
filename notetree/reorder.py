"""
Move up / move down primitives for manually ordered folders.

Both operations expect the folder's file indices to form a contiguous
permutation of 0..count-1, which holds right after a sync_files pass.
Indices are not re-compacted here.
"""
import logging

from .models import OrderNode


logger = logging.getLogger(__name__)


def move_up(node: OrderNode, name: str) -> bool:
    """
    Move a file one position towards the top of its folder.

    Args:
        node: Folder holding the file
        name: File name

    Returns:
        True if the file changed position
    """
    value = _current_index(node, name)
    if value is None:
        return False

    return _place(node, name, max(0, value - 1), displaced_by=1)


def move_down(node: OrderNode, name: str) -> bool:
    """
    Move a file one position towards the bottom of its folder.

    Args:
        node: Folder holding the file
        name: File name

    Returns:
        True if the file changed position
    """
    value = _current_index(node, name)
    if value is None:
        return False

    return _place(node, name, min(len(node.files) - 1, value + 1), displaced_by=-1)


def _current_index(node: OrderNode, name: str):
    if not node.is_ordered:
        logger.debug(f"Ignoring move of '{name}': folder '{node.name}' is unordered")
        return None

    value = node.files.get(name)
    if value is None:
        logger.debug(f"Ignoring move of '{name}': no order index in '{node.name}'")
    return value


def _place(node: OrderNode, name: str, target: int, displaced_by: int) -> bool:
    """Give name the target index and shift whichever sibling held it."""
    if node.files[name] == target:
        return False

    node.files[name] = target
    for key, index in node.files.items():
        if key != name and index == target:
            node.files[key] = target + displaced_by

    return True
