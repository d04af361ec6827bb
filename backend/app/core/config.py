from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Глобальные настройки приложения."""

    project_name: str = "BroCode API"
    api_v1_prefix: str = "/api/v1"

    db_host: str = "db"
    db_port: int = 5432
    db_user: str = "brocode"
    db_password: str = "brocode"
    db_name: str = "brocode"
    # полный URL (например sqlite+aiosqlite:// для тестов) важнее отдельных полей
    database_url_override: str | None = None

    backend_cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    secret_key: str = "CHANGE_ME_IN_PROD"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    log_level: str = "INFO"
    auto_create_tables: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def database_url(self) -> str:
        """Собирает URL подключения к базе данных."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


settings = Settings()
