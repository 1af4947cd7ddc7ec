"""Reserved names of the section-structured content format."""

# Top-level section holding the global version and document metadata.
CONFIG_SECTION = "config"
CONFIG_MARKER = f"[{CONFIG_SECTION}]"

GLOBAL_VERSION_KEY = "config_updated"
SECTION_TIMESTAMP_KEY = "_updated"

COMMENT_PREFIX = ";"
