"""
Configuration settings for the note tree ordering service.
"""
from pathlib import Path

# Metadata sidecar, one per notes root
META_DIR_NAME = ".unotes"
META_FILE_NAME = "unotes_meta.json"
META_SCHEMA_VERSION = 1

# Notes settings
NOTE_FILE_EXTENSION = ".md"

# First index handed to files discovered during a sync pass.
# Must stay above any index a compacted folder can hold.
NEXT_INDEX_SEED = 1_000_000

# Logging settings
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_LEVEL = "warning"


def meta_dir_path(notes_root: Path) -> Path:
    """Return the metadata folder for a notes root."""
    return Path(notes_root) / META_DIR_NAME


def meta_file_path(notes_root: Path) -> Path:
    """Return the sidecar record location for a notes root."""
    return meta_dir_path(notes_root) / META_FILE_NAME
