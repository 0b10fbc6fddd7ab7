"""User configuration for cxxforge."""

from cxxforge.config.models import UserConfigData
from cxxforge.config.user_config import UserConfig, create_user_config


__all__ = ["UserConfig", "UserConfigData", "create_user_config"]
