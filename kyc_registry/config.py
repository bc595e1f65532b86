"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class KYCRegistryConfig(BaseSettings):
    """KYC registry configuration"""

    model_config = SettingsConfigDict(
        env_prefix="KYC_REGISTRY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Registry configuration
    admin_identity: str = "0x0000000000000000000000000000000000000001"

    # Storage configuration
    database_url: str = "sqlite:///kyc_registry.db"  # or memory://

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090
    caller_header: str = "X-Caller-Identity"  # Set by the authenticating proxy

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Feature flags
    enable_audit_logging: bool = True


# Global configuration instance
config = KYCRegistryConfig()


def get_config() -> KYCRegistryConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> KYCRegistryConfig:
    """Reload configuration from environment"""
    global config
    config = KYCRegistryConfig()
    return config
