from .loader import ConfigLoader, OnboardSettings, to_settings

__all__ = ["ConfigLoader", "OnboardSettings", "to_settings"]
