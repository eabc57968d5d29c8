from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql+psycopg2://travelog:travelog@db:5432/travelog"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"
    # JSON lines for log shippers; set to false for a colored dev console.
    LOG_JSON: bool = True

    # Kill switch for the achievement engine. When off, dispatch() is a no-op.
    BADGE_EVALUATION_ENABLED: bool = True

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
