"""Environment configuration loader and validator"""

import os
from pathlib import Path
from typing import Dict, Optional, Any

from dotenv import dotenv_values
from rich.table import Table

from utils.console import get_console
from utils.paths import FrontlinePaths

# Default configuration values
DEFAULTS = {
    # Logging
    'LOG_LEVEL': 'INFO',
    'FRONTLINE_LOG_FILE': '',

    # Diagnostics thresholds file (empty = ~/.config/frontline/diagnostics.yaml)
    'FRONTLINE_DIAGNOSTICS_CONFIG': '',

    # Threshold overrides (empty = use config file / built-in default)
    'FRONTLINE_CLOUD_PING_THRESHOLD_MS': '',
    'FRONTLINE_ETHERNET_MIN_SPEED_MBPS': '',
    'FRONTLINE_ETHERNET_MAX_RX_DROPPED': '',
}

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def find_env_file() -> Optional[Path]:
    """Find the .env file in standard locations"""
    search_paths = [
        Path.cwd() / '.env',
        FrontlinePaths.get_env_file(),
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_env_file(env_path: Optional[Path] = None, override: bool = False) -> Dict[str, str]:
    """Load environment variables from .env file

    Args:
        env_path: Optional path to .env file. If None, auto-discovers.
        override: Replace variables already set in the environment

    Returns:
        Dictionary of variables that were applied
    """
    if env_path is None:
        env_path = find_env_file()

    if env_path is None or not Path(env_path).exists():
        return {}

    loaded = {}
    for key, value in dotenv_values(env_path).items():
        if value is None:
            continue
        if override or key not in os.environ:
            os.environ[key] = value
            loaded[key] = value

    return loaded


def get_config(key: str, default: Optional[str] = None) -> str:
    """Get configuration value from environment or defaults

    Priority:
    1. Environment variable
    2. Provided default
    3. Built-in default
    """
    return os.environ.get(key, default or DEFAULTS.get(key, ''))


def validate_config() -> Dict[str, Any]:
    """Validate current configuration and return status

    Returns:
        Dictionary with validation results
    """
    results = {
        'valid': True,
        'warnings': [],
        'errors': [],
        'config': {}
    }

    log_level = get_config('LOG_LEVEL').upper()
    if log_level not in VALID_LOG_LEVELS:
        results['errors'].append(f"Invalid LOG_LEVEL: {log_level}")
        results['valid'] = False
    results['config']['log_level'] = log_level

    config_path = get_config('FRONTLINE_DIAGNOSTICS_CONFIG')
    if config_path and not Path(config_path).exists():
        results['warnings'].append(f"Diagnostics config not found: {config_path}")
    results['config']['diagnostics_config'] = config_path or str(FrontlinePaths.get_diagnostics_config())

    for key in ('FRONTLINE_CLOUD_PING_THRESHOLD_MS', 'FRONTLINE_ETHERNET_MIN_SPEED_MBPS',
                'FRONTLINE_ETHERNET_MAX_RX_DROPPED'):
        value = get_config(key)
        if not value:
            continue
        try:
            float(value)
        except ValueError:
            results['errors'].append(f"{key} is not a number: {value}")
            results['valid'] = False

    return results


def show_config_summary():
    """Display current configuration summary"""
    table = Table(title="Current Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source", style="yellow")

    env_file = find_env_file()

    for key in sorted(DEFAULTS.keys()):
        env_value = os.environ.get(key)
        if env_value is not None:
            value, source = env_value, "env"
        else:
            value, source = DEFAULTS[key] or "(unset)", "default"
        table.add_row(key, value, source)

    console = get_console()
    console.print(table)

    if env_file:
        console.print(f"\n[dim]Loaded from: {env_file}[/dim]")
    else:
        console.print("\n[dim]No .env file found, using defaults[/dim]")
