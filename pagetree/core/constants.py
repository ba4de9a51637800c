"""
Layout Constants

Schema versions, history bounds and storage keys shared across the engine.
"""

# Current schema version written by the codec.
# Version 0 is the legacy format (string version "1.0", nested node config).
LAYOUT_SCHEMA_VERSION = 1
LEGACY_SCHEMA_VERSION = 0
LEGACY_VERSION_STRINGS = frozenset(["1.0"])

# Undo history keeps at most this many past states
HISTORY_CAPACITY = 50

# Storage key for the editor autosave document
AUTOSAVE_KEY = "pagetree-autosave"

# Redis key prefix for stored layout documents
REDIS_KEY_PREFIX = "pagetree:layout:"
