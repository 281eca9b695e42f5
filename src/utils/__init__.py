"""
Logging facade and per-user paths.
"""
from src.utils.message import Log
from src.utils.paths import (
    get_app_install_dir,
    get_logs_dir,
    get_preferences_path,
    get_user_config_dir,
    get_user_data_dir,
)

__all__ = [
    'Log',
    'get_app_install_dir',
    'get_logs_dir',
    'get_preferences_path',
    'get_user_config_dir',
    'get_user_data_dir',
]
