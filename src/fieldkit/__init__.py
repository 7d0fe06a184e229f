"""
fieldkit
========

Declarative field framework for posts, taxonomy terms and settings pages.

This package provides:
    - A field type registry with 18 built-in leaf and container types
    - Recursive container expansion (tabs, metaboxes, groups)
    - A save pipeline: before-save filters, sanitize, validate, persist
    - A context router reading values back from post, term and settings stores
    - Declarative documents from mappings or JSON (validated with jsonschema)

Basic usage:
    >>> from fieldkit import FieldManager, get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> manager = FieldManager()
    >>> manager.register_from_mapping({
    ...     "settings_pages": [{
    ...         "id": "store-settings",
    ...         "menu_title": "Store",
    ...         "fields": [{"name": "currency", "type": "text", "default": "USD"}],
    ...     }]
    ... })
    >>> manager.get_settings_field("currency", "store-settings", "USD")
    'USD'

Custom field types:
    >>> from fieldkit import TextField
    >>>
    >>> class SlugField(TextField):
    ...     def sanitize(self, value):
    ...         return super().sanitize(value).lower().replace(" ", "-")
    >>>
    >>> manager.register_field_type("slug", SlugField)

Configuration:
    >>> import os
    >>> os.environ["FIELDKIT_LOG_LEVEL"] = "DEBUG"
    >>>
    >>> from fieldkit import load_config
    >>> manager = FieldManager(options=load_config())
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# VERSION METADATA
# =============================================================================

__version__ = "0.1.0"
__description__ = "Declarative field framework for posts, terms and settings pages"
__license__ = "MIT"

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


def _setup_logging() -> None:
    """
    Initialise package-wide logging.

    Configures the ``fieldkit`` logger with a stderr handler for WARNING and
    above, using a timestamp / level / module.function:line format. The level
    comes from the FIELDKIT_LOG_LEVEL environment variable (DEBUG, INFO,
    WARNING, ERROR, CRITICAL; default INFO).

    Called on import. Idempotent.
    """
    log_level_str = os.environ.get("FIELDKIT_LOG_LEVEL", "INFO").upper()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_level_map.get(log_level_str, logging.INFO)

    root_logger = logging.getLogger("fieldkit")
    if root_logger.handlers:
        return

    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt=("[%(asctime)s] %(levelname)-8s " "[%(name)s.%(funcName)s:%(lineno)d] %(message)s"),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    root_logger.propagate = False


def get_logger(module_name: str) -> logging.Logger:
    """
    Return a logger inside the ``fieldkit`` namespace.

    Args:
        module_name: Usually ``__name__``; names outside the package are
            prefixed with ``fieldkit.``

    Example:
        >>> logger = get_logger("my_plugin")
        >>> logger.name
        'fieldkit.my_plugin'
    """
    if not module_name.startswith("fieldkit"):
        if module_name == "__main__":
            full_name = "fieldkit.main"
        else:
            clean_name = module_name.lstrip(".")
            full_name = f"fieldkit.{clean_name}"
    else:
        full_name = module_name

    return logging.getLogger(full_name)


_setup_logging()

# =============================================================================
# PUBLIC API
# =============================================================================

from fieldkit.core import (  # noqa: E402
    FIELD_CAPABILITIES,
    CapabilityError,
    ConfigError,
    ContainerFieldProtocol,
    Context,
    ContextType,
    DocumentError,
    FieldConfig,
    FieldKitError,
    FieldProtocol,
    FieldTypeRegistry,
    FieldValidationError,
    KeyValueStore,
    ResourceHost,
    UnknownTypeError,
    build_storage_key,
)
from fieldkit.document import (  # noqa: E402
    Document,
    DocumentValidator,
    JsonSchemaDocumentValidator,
    ResourceDeclaration,
)
from fieldkit.fields import BUILTIN_FIELD_TYPES, BaseField, ContainerField, FieldKind, TextField  # noqa: E402
from fieldkit.filters import SKIP, FilterChain  # noqa: E402
from fieldkit.host import InMemoryResourceHost  # noqa: E402
from fieldkit.manager import DEFAULT_OPTIONS, FieldManager  # noqa: E402
from fieldkit.pipeline import FieldError, SavePipeline, SaveReport, expand_fields  # noqa: E402
from fieldkit.rendering import AssetCollector, FieldRenderer, RenderScope  # noqa: E402
from fieldkit.router import ContextRouter  # noqa: E402
from fieldkit.storage import InMemoryScopedStore, InMemorySettingsStore  # noqa: E402
from fieldkit.validation import ValidationResult  # noqa: E402

# =============================================================================
# CONFIGURATION
# =============================================================================

_DEFAULT_CONFIG: Dict[str, Any] = {"log_level": "INFO", **DEFAULT_OPTIONS}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load options from ``fieldkit.json`` or fall back to defaults.

    Configuration keys:
        - log_level: str - Logging level name
        - css_prefix: str - Class prefix used in rendered markup
        - validate_documents: bool - Validate JSON documents before registering
        - warn_on_name_collision: bool - Warn when two fields of one resource
          share a name

    Args:
        config_path: Optional path; defaults to ``fieldkit.json`` in the
            current directory.

    Returns:
        Defaults updated with the file's values. Unreadable files, invalid
        JSON and non-object roots are logged as warnings and ignored.
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path("fieldkit.json")

    config = _DEFAULT_CONFIG.copy()

    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)

            if not isinstance(user_config, dict):
                raise ValueError(
                    f"Config file must contain a JSON object, got {type(user_config).__name__}"
                )

            config.update(user_config)

            logger.info(f"Configuration loaded from {config_path}")
            logger.debug(f"Configuration: {config}")

        except json.JSONDecodeError as e:
            logger.warning(
                f"Cannot parse {config_path}: invalid JSON at line {e.lineno}, "
                f"column {e.colno}. Using default configuration."
            )
        except OSError as e:
            logger.warning(f"Cannot read {config_path}: {e}. Using default configuration.")
        except ValueError as e:
            logger.warning(f"Invalid configuration format: {e}. Using default configuration.")
    else:
        logger.info(f"Config file {config_path} not found. Using default configuration.")

    return config


__all__ = [
    "__version__",
    "get_logger",
    "load_config",
    "FieldManager",
    "DEFAULT_OPTIONS",
    "FieldTypeRegistry",
    "FieldConfig",
    "FieldProtocol",
    "ContainerFieldProtocol",
    "FIELD_CAPABILITIES",
    "KeyValueStore",
    "ResourceHost",
    "Context",
    "ContextType",
    "build_storage_key",
    "FieldKitError",
    "ConfigError",
    "UnknownTypeError",
    "DocumentError",
    "CapabilityError",
    "FieldValidationError",
    "ValidationResult",
    "BUILTIN_FIELD_TYPES",
    "BaseField",
    "ContainerField",
    "FieldKind",
    "TextField",
    "SKIP",
    "FilterChain",
    "SavePipeline",
    "SaveReport",
    "FieldError",
    "expand_fields",
    "FieldRenderer",
    "AssetCollector",
    "RenderScope",
    "ContextRouter",
    "InMemoryScopedStore",
    "InMemorySettingsStore",
    "InMemoryResourceHost",
    "Document",
    "ResourceDeclaration",
    "DocumentValidator",
    "JsonSchemaDocumentValidator",
]
