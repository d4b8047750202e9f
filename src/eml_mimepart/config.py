"""
Package configuration management.

This module handles configuration from environment variables using Pydantic Settings.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Decoding configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Charset conversion
    default_charset: str = "utf-8"  # Tried first when a part declares no usable charset
    fallback_charset: str = "iso-8859-1"  # 8-bit, never fails to decode
    detect_charset: bool = True  # Ask charset-normalizer before the fallback

    # Stream reads
    stream_read_chunk_size: int = 65536

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Global settings instance
settings = Settings()
