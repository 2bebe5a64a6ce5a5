"""Module-level constants for the vault link graph server."""

import os
from pathlib import Path

# Configuration
CONFIG_PATH = Path(os.getenv("VAULT_GRAPH_CONFIG", str(Path(__file__).parent.parent / "vaults.yaml")))

# Note files
NOTE_EXTENSION = ".md"
# Bracketed targets with these extensions are attachments, not notes
ATTACHMENT_EXTENSIONS = frozenset({
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg", ".webp", ".avif",
    ".pdf", ".mp3", ".wav", ".m4a", ".ogg", ".flac", ".webm", ".mp4", ".mov", ".mkv",
    ".canvas", ".excalidraw", ".base",
})

# Scanning: names starting with these markers are skipped (dotfiles, .obsidian, .trash, .git)
EXCLUDED_PREFIXES = (".",)
# Dependency caches that can show up inside a vault folder
EXCLUDED_DIR_NAMES = frozenset({"node_modules", "__pycache__", "venv", "site-packages"})

# Bounded worker pool for file reads and per-file rewrites
SCAN_WORKERS = max(1, int(os.getenv("VAULT_GRAPH_SCAN_WORKERS", "8")))

# Integrity checker
MAX_SUGGESTIONS = 3

# Analytics
MIN_CLUSTER_SIZE = 3

# Logging
LOG_LEVEL = os.getenv("VAULT_GRAPH_LOG_LEVEL", "INFO")
