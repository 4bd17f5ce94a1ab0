from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "dev"  # dev | prod
    root_path: str = ""
    cors_origins: list[str] = ["http://localhost:3000"]

    # Full URL wins over the postgres_* parts (tests and sqlite deployments).
    database_url_override: str = ""
    postgres_db: str = "ampa_membership"
    postgres_user: str = "ampa_user"
    postgres_password: str = "ampa_pass"
    postgres_host: str = "db"
    postgres_port: int = 5432

    session_cookie_name: str = "session"
    session_max_age_days: int = 7

    association_name: str = "AMPA Agustinos Granada"

    log_level: str = "INFO"
    log_format: str = "console"  # console | json

    # Gemini (optional family summaries)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout_seconds: float = 20.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def is_production(self) -> bool:
        return self.app_env == "prod"

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60


settings = Settings()
