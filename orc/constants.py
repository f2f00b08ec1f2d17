"""Constants used across orc.

Internal policy values. User-facing settings live in orc.config.
"""

# Unit roles written to .orc/config.json
ROLE_GOBLIN = "GOBLIN"  # Orchestrator agent, lives in the gatehouse
ROLE_IMP = "IMP"  # Implementation agent, lives in a workbench

UNIT_CONFIG_VERSION = "1.0"
UNIT_CONFIG_DIR = ".orc"
UNIT_CONFIG_FILE = "config.json"

# tmux pane/window options. @pane_role is authoritative for pane identity.
PANE_ROLE_OPTION = "@pane_role"
BENCH_ID_OPTION = "@bench_id"
WORKSHOP_ID_OPTION = "@workshop_id"
ENRICHED_WINDOW_OPTION = "@orc_enriched"
GOBLIN_PANE_ROLE = "goblin"

# Session environment variable used to find a workshop's session after renames
WORKSHOP_ENV_VAR = "ORC_WORKSHOP_ID"

DEFAULT_FACTORY_NAME = "default"
FACTORY_SOCKET_PREFIX = "orc-"

# Registry entity status
STATUS_ACTIVE = "active"

# Environment overrides
ENV_CONFIG_PATH = "ORC_CONFIG_PATH"
ENV_ENV_PATH = "ORC_ENV_PATH"
ENV_HOME = "ORC_HOME"
ENV_LOG_LEVEL = "ORC_LOG_LEVEL"
