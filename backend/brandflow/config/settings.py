# /brandflow/config/settings.py

import sys
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


SUPPORTED_AI_PROVIDERS = ("gemini", "openai")


class Settings(BaseSettings):
    # App Metadata
    environment: str = "production"
    api_version: str = "v1"
    workers: int = 4

    # MongoDB (document store for the flow cache and execution logs)
    mongo_uri: str = "mongodb://localhost:27017/brandflow"
    max_pool_size: int = 10
    min_pool_size: int = 1
    mongo_ssl: bool = False
    cache_collection: str = "cache"
    flow_log_collection: str = "flows"

    # AI APIs
    ai_provider: str = "gemini"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    ai_timeout_seconds: float = 60.0

    # Flow behaviour
    brand_cache_ttl_days: int = 7

    # Lead processing (external Cloud Function)
    firebase_project_id: str | None = None
    lead_function_url: str | None = None
    lead_timeout_seconds: float = 10.0

    # Security
    api_key: str | None = None

    # CORS / hosts
    cors_allowed_origins: str = "http://localhost:3000"
    allowed_hosts: str = "localhost,127.0.0.1"

    # Observability
    alerting_webhook_url: str | None = None

    # Limits
    rate_limit_per_minute: int = 100
    lead_rate_limit_per_minute: int = 10

    # ---------------- Validators ---------------- #

    @field_validator("ai_provider")
    @classmethod
    def provider_must_be_supported(cls, v: str) -> str:
        v = v.lower()
        if v not in SUPPORTED_AI_PROVIDERS:
            raise ValueError(f"AI_PROVIDER must be one of {', '.join(SUPPORTED_AI_PROVIDERS)}")
        return v

    @model_validator(mode="after")
    def derive_lead_function_url(self):
        if not self.lead_function_url and self.firebase_project_id:
            self.lead_function_url = (
                f"https://us-central1-{self.firebase_project_id}.cloudfunctions.net/submitLead"
            )
        return self

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def validate_environment(settings_obj: Settings):
    try:
        if settings_obj.environment == "production":
            if settings_obj.ai_provider == "gemini" and not settings_obj.gemini_api_key:
                raise ValueError("GEMINI_API_KEY is required when AI_PROVIDER=gemini")
            if settings_obj.ai_provider == "openai" and not settings_obj.openai_api_key:
                raise ValueError("OPENAI_API_KEY is required when AI_PROVIDER=openai")
            if not settings_obj.lead_function_url:
                raise ValueError("LEAD_FUNCTION_URL or FIREBASE_PROJECT_ID is required in production")

        return settings_obj

    except Exception as e:
        print(f"--- [ERROR] Environment validation failed: {e}")
        sys.exit(1)


settings = Settings()
validate_environment(settings)
