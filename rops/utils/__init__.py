from .config import DEFAULT_CONFIG, FAILURE_POLICIES, load_config, merge_config, validate_rops_config
from .logging_utils import setup_logging

__all__ = [
    'DEFAULT_CONFIG',
    'FAILURE_POLICIES',
    'load_config',
    'merge_config',
    'validate_rops_config',
    'setup_logging',
]
