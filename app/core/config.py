from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.docker"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "environment", "ENV"))
    APP_NAME: str = Field(default="table_order", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))

    # Infrastructure
    DATABASE_URL: str = Field(
        default="postgresql+asyncpg://postgres:postgres@db:5432/table_order_db",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )
    DATABASE_SSL: bool = Field(default=False, validation_alias=AliasChoices("DATABASE_SSL", "database_ssl"))
    REDIS_URL: str = Field(
        default="redis://redis:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "redis_url"),
    )

    # Admin
    ADMIN_API_KEY: str = Field(default="", validation_alias=AliasChoices("ADMIN_API_KEY", "admin_api_key"))
    ADMIN_JWT_SECRET: str = Field(default="change-me", validation_alias=AliasChoices("ADMIN_JWT_SECRET", "admin_jwt_secret"))
    ADMIN_JWT_ACCESS_EXPIRE_MINUTES: int = Field(
        default=24 * 60,
        validation_alias=AliasChoices("ADMIN_JWT_ACCESS_EXPIRE_MINUTES", "admin_jwt_access_expire_minutes"),
    )

    # Billing settings resolution
    SETTINGS_CACHE_TTL_SECONDS: int = Field(
        default=300,
        validation_alias=AliasChoices("SETTINGS_CACHE_TTL_SECONDS", "settings_cache_ttl_seconds"),
    )
    SETTINGS_FETCH_RETRIES: int = Field(
        default=2,
        validation_alias=AliasChoices("SETTINGS_FETCH_RETRIES", "settings_fetch_retries"),
    )
    SETTINGS_FETCH_TIMEOUT_SECONDS: float = Field(
        default=3.0,
        validation_alias=AliasChoices("SETTINGS_FETCH_TIMEOUT_SECONDS", "settings_fetch_timeout_seconds"),
    )

    # WhatsApp Meta (coupon notifications, OTP delivery)
    WHATSAPP_ACCESS_TOKEN: str = Field(default="", validation_alias=AliasChoices("WHATSAPP_ACCESS_TOKEN", "whatsapp_access_token"))
    WHATSAPP_PHONE_NUMBER_ID: str = Field(default="", validation_alias=AliasChoices("WHATSAPP_PHONE_NUMBER_ID", "whatsapp_phone_number_id"))
    WHATSAPP_COUNTRY_CODE: str = Field(default="91", validation_alias=AliasChoices("WHATSAPP_COUNTRY_CODE", "whatsapp_country_code"))
    OTP_WHATSAPP_ENABLED: bool = Field(default=False, validation_alias=AliasChoices("OTP_WHATSAPP_ENABLED", "otp_whatsapp_enabled"))


settings = Settings()
