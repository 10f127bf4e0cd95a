"""Application configuration."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Storage
    storage_backend: Literal["json", "memory"] = Field(
        default="json",
        description="Collection store backend: JSON files on disk or in-memory only"
    )
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory holding users.json, entries.json and votes.json"
    )
    uploads_dir: Path = Field(
        default=Path("./uploads"),
        description="Directory where uploaded entry images are stored"
    )
    seed_demo_user: bool = Field(
        default=True,
        description="Seed the demo account when the users collection does not exist yet"
    )

    # Contest rules
    allowed_email_domain: str = Field(
        default="ofiservices.com",
        description="Only emails ending with @<domain> may register"
    )

    # Uploads
    max_upload_size: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum image upload size in bytes (5MB)"
    )
    allowed_image_extensions: str = Field(
        default="jpeg,jpg,png,gif,webp",
        description="Comma-separated list of accepted image extensions"
    )

    @property
    def allowed_image_extensions_list(self) -> list[str]:
        """Parse image extensions from comma-separated string."""
        return [
            ext.strip().lower().lstrip(".")
            for ext in self.allowed_image_extensions.split(",")
            if ext.strip()
        ]

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # Security
    secret_key: str = Field(
        default="change-this-to-a-random-secret-key-in-production",
        description="Secret key for JWT token generation"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    jwt_expiration_hours: int = Field(default=24 * 7, description="JWT token expiration in hours")
    bcrypt_rounds: int = Field(default=10, description="bcrypt cost factor for password hashes")
    admin_password: str | None = Field(
        default=None,
        description="Admin password for management endpoints (admin endpoints are disabled when unset)"
    )

    # Development Settings
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Log level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @field_validator("allowed_email_domain")
    @classmethod
    def validate_email_domain(cls, v: str) -> str:
        """Normalize the domain and reject empty values."""
        domain = v.strip().lstrip("@").lower()
        if not domain:
            raise ValueError("allowed_email_domain must not be empty")
        return domain

    @field_validator("max_upload_size", "jwt_expiration_hours")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Validate integer is positive."""
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}")
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        """Validate bcrypt cost factor is within the range bcrypt accepts."""
        if not 4 <= v <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return v


# Global settings instance
settings = Settings()
