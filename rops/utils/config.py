"""
Configuration loading and validation.
"""

import copy
import math
import numbers
from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from ..exceptions import InvalidConfiguration

DEFAULT_CONFIG = {
    'rops': {
        'support_radius': 0.0285,
        'number_of_rotations': 3,
        'number_of_bins': 5,
        'normalize_descriptor': True,
        'failure_policy': 'skip',
        'degeneracy_tolerance': 1e-10,
        'num_workers': 1,
        'show_progress': False,
    },
    'reconstruction': {
        'normal_radius': 0.01,
        'normal_max_nn': 30,
        'ball_radii': [0.005, 0.01, 0.02],
        'viewpoint': [0.0, 0.0, 0.0],
    },
    'source': {
        'type': 'synthetic',
        'path': None,
        'shape': 'sphere',
        'radius': 0.05,
        'resolution': 30,
        'noise': 0.0,
        'seed': 0,
    },
    'logging': {
        'level': 'INFO',
        'log_file': None,
    },
}

FAILURE_POLICIES = ('skip', 'zero', 'raise')


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict:
    """Load configuration from YAML file, filling missing keys from DEFAULT_CONFIG."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is None:
        return config

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        user_config = yaml.safe_load(f) or {}

    if not isinstance(user_config, dict):
        raise InvalidConfiguration(f"Config file {config_path} must contain a mapping")

    return merge_config(config, user_config)


def merge_config(base: Dict, override: Dict) -> Dict:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def _require_int(config: Dict, key: str, minimum: int) -> int:
    value = config[key]
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidConfiguration(f"{key} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidConfiguration(f"{key} must be >= {minimum}, got {value}")
    return int(value)


def validate_rops_config(config: Optional[Dict] = None) -> Dict:
    """
    Validate the RoPS section of the configuration.

    Args:
        config: RoPS parameters; missing keys take their default values

    Returns:
        Dict: A complete, validated copy of the parameters

    Raises:
        InvalidConfiguration: If any parameter is out of range
    """
    params = dict(DEFAULT_CONFIG['rops'])
    params.update(config or {})

    radius = params['support_radius']
    if isinstance(radius, bool) or not isinstance(radius, numbers.Real):
        raise InvalidConfiguration(f"support_radius must be a number, got {radius!r}")
    if not math.isfinite(radius) or radius <= 0:
        raise InvalidConfiguration(f"support_radius must be positive, got {radius}")
    params['support_radius'] = float(radius)

    params['number_of_rotations'] = _require_int(params, 'number_of_rotations', 1)
    params['number_of_bins'] = _require_int(params, 'number_of_bins', 1)
    params['num_workers'] = _require_int(params, 'num_workers', 1)

    tolerance = params['degeneracy_tolerance']
    if isinstance(tolerance, bool) or not isinstance(tolerance, numbers.Real) or tolerance < 0:
        raise InvalidConfiguration(f"degeneracy_tolerance must be a non-negative number, got {tolerance!r}")
    params['degeneracy_tolerance'] = float(tolerance)

    if params['failure_policy'] not in FAILURE_POLICIES:
        raise InvalidConfiguration(
            f"failure_policy must be one of {FAILURE_POLICIES}, got {params['failure_policy']!r}"
        )

    return params
