"""
Loading of pluggable integration backends from dotted paths in settings.
"""

import importlib
import logging

from django.conf import settings

from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def load_backend(setting_name: str, default: str, **kwargs):
    """
    Instantiate the backend class named by a settings value.

    Args:
        setting_name: Name of the setting holding the dotted class path
        default: Dotted path used when the setting is empty
        **kwargs: Passed to the backend constructor

    Raises:
        ConfigurationError: the path does not name an importable class
    """
    backend = getattr(settings, setting_name, None) or default

    try:
        # Dynamically import the backend class
        module_path, class_name = backend.rsplit(".", 1)
        module = importlib.import_module(module_path)
        backend_class = getattr(module, class_name)
    except (ImportError, AttributeError, ValueError) as e:
        logger.error(f"Error loading {setting_name} backend '{backend}': {str(e)}")
        raise ConfigurationError(f"Invalid {setting_name}: {backend}") from e

    return backend_class(**kwargs)
