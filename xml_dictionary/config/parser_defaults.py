"""
Centralized configuration defaults for dictionary parsing.

This module defines operational configuration constants used throughout the engine.
Environment variables (see config_manager) can override these defaults at runtime.

Single Source of Truth: Change these values once; all modules automatically use updated defaults.
"""


class ParserDefaults:
    """
    Centralized operational configuration for dictionary parsing.

    All values are defaults that can be overridden via environment variables:
    - XML_DICTIONARY_UNKNOWN_TRANSFORM=strict
    - XML_DICTIONARY_PER_NODE_POLICY=collect_all
    - XML_DICTIONARY_LOG_LEVEL=DEBUG
    """

    # Transform dispatch
    UNKNOWN_TRANSFORM_POLICY = "null"  # "null" yields None, "strict" raises UnknownTransformError
    PER_NODE_POLICY = "last_wins"  # "last_wins" or "collect_all" for per-node callbacks over node lists

    # XML loading
    RECOVER = False  # lxml recover mode for malformed input
    RESOLVE_ENTITIES = False  # Security: don't resolve external entities
    NO_NETWORK = True  # Security: disable network access

    # Dictionary files
    DICTIONARY_PATH = "config/dictionary.yaml"

    # Logging
    LOG_LEVEL = "WARNING"  # Default logging level (CRITICAL, ERROR, WARNING, INFO, DEBUG)

    @classmethod
    def to_dict(cls) -> dict:
        """
        Export all defaults as a dictionary.

        Returns:
            Dictionary of all ParserDefaults class attributes.
        """
        return {
            key: getattr(cls, key)
            for key in dir(cls)
            if not key.startswith('_') and key.isupper()
        }

    @classmethod
    def log_summary(cls, logger=None):
        """
        Log a summary of all operational defaults.

        Args:
            logger: Optional logger instance. If None, prints to stdout.
        """
        config_dict = cls.to_dict()
        summary = "\n".join([f"  {key}: {value}" for key, value in sorted(config_dict.items())])
        message = f"Parser Configuration Defaults:\n{summary}"

        if logger:
            logger.info(message)
        else:
            print(message)
