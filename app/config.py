from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = ""
    environment: str = "dev"
    log_level: str = "INFO"
    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    # Roster upload settings
    roster_max_rows: int = 200
    roster_max_size: int = 2 * 1024 * 1024  # 2MB default
    # Students added per request from the names text box
    names_batch_max: int = 100


settings = Settings()  # type: ignore
