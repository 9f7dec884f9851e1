"""Constants for svcs."""

# Repository marker directory
SVCS_DIR = ".svcs"

# Storage files (inside SVCS_DIR)
CONFIG_FILE = "config.txt"
INDEX_FILE = "index.txt"
LOG_FILE = "log.txt"
COMMITS_DIR = "commits"

# Suffix of the ordered path manifest stored next to each snapshot container
MANIFEST_SUFFIX = ".files"

# Environment overrides
AUTHOR_ENV_VAR = "SVCS_AUTHOR"
DEBUG_ENV_VAR = "SVCS_DEBUG"

# Shortest hash prefix accepted by checkout
MIN_HASH_PREFIX = 4

# Version
SVCS_VERSION = "0.1.0"
