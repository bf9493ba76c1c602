from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/habits"

    # Auth tokens (x-auth-token / Authorization: Bearer)
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    # Goal expiry job
    goal_expiry_enabled: bool = True
    goal_expiry_interval_seconds: float = 3600.0  # once per hour

    create_tables: bool = True  # metadata.create_all on startup

    log_level: str = "INFO"
    log_json: bool = True

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
