"""
Frontline Path Constants

Centralized path definitions for user config and logs.

IMPORTANT: Always use get_real_user_home() instead of Path.home() when
the path should be in the user's home directory. Installers often run
the commissioning tools with sudo, and the thresholds file belongs to
the real user, not root.
"""

from pathlib import Path
import os


def get_real_user_home() -> Path:
    """
    Get the real user's home directory, even when running as root via sudo.

    Returns:
        Path to the real user's home directory
    """
    sudo_user = os.environ.get('SUDO_USER')
    if sudo_user and sudo_user != 'root':
        return Path(f'/home/{sudo_user}')

    return Path.home()


class FrontlinePaths:
    """Paths related to the Frontline commissioning tools"""

    @classmethod
    def get_config_dir(cls) -> Path:
        """Get Frontline config directory"""
        return get_real_user_home() / '.config' / 'frontline'

    @classmethod
    def get_diagnostics_config(cls) -> Path:
        """Get the diagnostics thresholds file"""
        return cls.get_config_dir() / 'diagnostics.yaml'

    @classmethod
    def get_env_file(cls) -> Path:
        """Get the user-level .env file"""
        return cls.get_config_dir() / '.env'

    @classmethod
    def get_log_dir(cls) -> Path:
        """Get Frontline log directory"""
        return get_real_user_home() / '.local' / 'state' / 'frontline'

    @classmethod
    def get_log_file(cls) -> Path:
        return cls.get_log_dir() / 'diagnostics.log'
