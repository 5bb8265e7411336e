"""
Diagnostic Threshold Configuration

Fixed thresholds (power, cellular) are module constants shared by the
evaluator and the rulebook text. Deployment-specific thresholds (cloud
ping limit, pressure bands, optional ethernet limits) live in Thresholds
and can be loaded from YAML with per-value environment overrides.

Config file (YAML), default ~/.config/frontline/diagnostics.yaml:

    cloud_ping_threshold_ms: 250
    manifold:
      expected_low: 30
      expected_high: 80
      marginal_low: 20
    source:
      expected_low: 30
      expected_high: 80
      marginal_low: 20
    ethernet_min_speed_mbps: 1000     # optional
    ethernet_max_rx_dropped: 500      # optional
"""

import logging
import math
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from utils.paths import FrontlinePaths

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


# === Fixed thresholds ===

POWER_NORMAL_V: Tuple[float, float] = (12.0, 15.0)     # inclusive
POWER_MARGINAL_V: Tuple[float, float] = (11.0, 16.0)   # inclusive, outside normal

CELLULAR_MIN_STRENGTH = 40        # percent
CELLULAR_MAX_PACKET_LOSS = 2.0    # percent

DEFAULT_CLOUD_PING_THRESHOLD_MS = 250.0

ENV_CONFIG_PATH = 'FRONTLINE_DIAGNOSTICS_CONFIG'
ENV_PREFIX = 'FRONTLINE_'


@dataclass(frozen=True)
class PressureBand:
    """Expected operating range for one pressure sensor, in PSI.

    Readings in [marginal_low, expected_low) are marginal; anything below
    marginal_low or above expected_high is out of range.
    """
    expected_low: float = 30.0
    expected_high: float = 80.0
    marginal_low: float = 20.0

    def validate(self, name: str) -> 'PressureBand':
        values = (self.expected_low, self.expected_high, self.marginal_low)
        if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
            raise ConfigError(f"{name}: pressure band values must be finite numbers")
        if not self.marginal_low <= self.expected_low <= self.expected_high:
            raise ConfigError(
                f"{name}: need marginal_low <= expected_low <= expected_high, "
                f"got {self.marginal_low} / {self.expected_low} / {self.expected_high}"
            )
        return self


@dataclass(frozen=True)
class Thresholds:
    """Deployment-tunable thresholds. Immutable; share freely across threads."""
    cloud_ping_threshold_ms: float = DEFAULT_CLOUD_PING_THRESHOLD_MS
    manifold: PressureBand = field(default_factory=PressureBand)
    source: PressureBand = field(default_factory=PressureBand)
    # Disabled when None
    ethernet_min_speed_mbps: Optional[float] = None
    ethernet_max_rx_dropped: Optional[int] = None

    def validate(self) -> 'Thresholds':
        if not self.cloud_ping_threshold_ms > 0:
            raise ConfigError("cloud_ping_threshold_ms must be positive")
        self.manifold.validate('manifold')
        self.source.validate('source')
        if self.ethernet_min_speed_mbps is not None and self.ethernet_min_speed_mbps <= 0:
            raise ConfigError("ethernet_min_speed_mbps must be positive")
        if self.ethernet_max_rx_dropped is not None and self.ethernet_max_rx_dropped < 0:
            raise ConfigError("ethernet_max_rx_dropped must not be negative")
        return self

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Thresholds':
        """Build thresholds from a parsed config mapping."""
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError("Diagnostics config must be a mapping")

        allowed = {'cloud_ping_threshold_ms', 'manifold', 'source',
                   'ethernet_min_speed_mbps', 'ethernet_max_rx_dropped'}
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}")

        defaults = cls()
        return cls(
            cloud_ping_threshold_ms=_number(
                data, 'cloud_ping_threshold_ms', defaults.cloud_ping_threshold_ms),
            manifold=_band(data.get('manifold'), 'manifold'),
            source=_band(data.get('source'), 'source'),
            ethernet_min_speed_mbps=_number(data, 'ethernet_min_speed_mbps', None),
            ethernet_max_rx_dropped=_integer(data, 'ethernet_max_rx_dropped', None),
        ).validate()

    def to_dict(self) -> dict:
        return {
            'cloud_ping_threshold_ms': self.cloud_ping_threshold_ms,
            'manifold': vars(self.manifold).copy(),
            'source': vars(self.source).copy(),
            'ethernet_min_speed_mbps': self.ethernet_min_speed_mbps,
            'ethernet_max_rx_dropped': self.ethernet_max_rx_dropped,
        }


DEFAULT_THRESHOLDS = Thresholds()


def _number(data: dict, key: str, default):
    value = data.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected number, got {value!r}")
    try:
        return float(value)
    except OverflowError:
        raise ConfigError(f"{key}: number out of range") from None
    except (TypeError, ValueError):
        raise ConfigError(f"{key}: expected number, got {value!r}") from None


def _integer(data: dict, key: str, default):
    value = _number(data, key, default)
    if value is None:
        return None
    if not math.isfinite(value) or value != int(value):
        raise ConfigError(f"{key}: expected integer, got {value!r}")
    return int(value)


def _band(data: Optional[dict], name: str) -> PressureBand:
    if data is None:
        return PressureBand()
    if not isinstance(data, dict):
        raise ConfigError(f"{name}: expected a mapping")
    unknown = sorted(set(data) - {'expected_low', 'expected_high', 'marginal_low'})
    if unknown:
        raise ConfigError(f"{name}: unknown key(s) {', '.join(unknown)}")
    defaults = PressureBand()
    return PressureBand(
        expected_low=_number(data, 'expected_low', defaults.expected_low),
        expected_high=_number(data, 'expected_high', defaults.expected_high),
        marginal_low=_number(data, 'marginal_low', defaults.marginal_low),
    )


def get_config_path() -> Path:
    """Config file location: $FRONTLINE_DIAGNOSTICS_CONFIG or ~/.config/frontline/."""
    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        return Path(env_path)
    return FrontlinePaths.get_diagnostics_config()


def apply_env_overrides(thresholds: Thresholds, environ=None) -> Thresholds:
    """Apply FRONTLINE_* environment overrides on top of loaded thresholds.

    Recognized variables:
        FRONTLINE_CLOUD_PING_THRESHOLD_MS
        FRONTLINE_MANIFOLD_EXPECTED_LOW / _EXPECTED_HIGH / _MARGINAL_LOW
        FRONTLINE_SOURCE_EXPECTED_LOW / _EXPECTED_HIGH / _MARGINAL_LOW
        FRONTLINE_ETHERNET_MIN_SPEED_MBPS
        FRONTLINE_ETHERNET_MAX_RX_DROPPED
    """
    environ = os.environ if environ is None else environ

    def env(name):
        return environ.get(ENV_PREFIX + name)

    top = {}
    for key in ('cloud_ping_threshold_ms', 'ethernet_min_speed_mbps', 'ethernet_max_rx_dropped'):
        value = env(key.upper())
        if value is not None:
            top[key] = value

    bands = {}
    for sensor in ('manifold', 'source'):
        band = {}
        for key in ('expected_low', 'expected_high', 'marginal_low'):
            value = env(f"{sensor}_{key}".upper())
            if value is not None:
                band[key] = value
        if band:
            merged = dict(vars(getattr(thresholds, sensor)))
            merged.update(band)
            bands[sensor] = _band(merged, sensor)

    if not top and not bands:
        return thresholds

    logger.debug(f"Applying environment overrides: {sorted(top) + sorted(bands)}")
    changes = {}
    if 'cloud_ping_threshold_ms' in top:
        changes['cloud_ping_threshold_ms'] = _number(top, 'cloud_ping_threshold_ms', None)
    if 'ethernet_min_speed_mbps' in top:
        changes['ethernet_min_speed_mbps'] = _number(top, 'ethernet_min_speed_mbps', None)
    if 'ethernet_max_rx_dropped' in top:
        changes['ethernet_max_rx_dropped'] = _integer(top, 'ethernet_max_rx_dropped', None)
    changes.update(bands)
    return replace(thresholds, **changes).validate()


def load_thresholds(path: Optional[Path] = None, use_env: bool = True) -> Thresholds:
    """
    Load thresholds from YAML, falling back to defaults when no file exists.

    Args:
        path: Explicit config file (must exist if given)
        use_env: Apply FRONTLINE_* environment overrides

    Raises:
        ConfigError: File unreadable, not valid YAML, or values invalid
    """
    explicit = path is not None
    config_path = Path(path) if explicit else get_config_path()

    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except UnicodeDecodeError as e:
            raise ConfigError(f"Cannot decode {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read {config_path}: {e}") from e
        thresholds = Thresholds.from_dict(data)
        logger.info(f"Loaded diagnostic thresholds from {config_path}")
    elif explicit:
        raise ConfigError(f"Config file not found: {config_path}")
    else:
        logger.debug("No diagnostics config found, using defaults")
        thresholds = DEFAULT_THRESHOLDS

    if use_env:
        thresholds = apply_env_overrides(thresholds)
    return thresholds
