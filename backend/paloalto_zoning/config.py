from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Palo Alto R-1 Zoning Engine"
    version: str = "1.0.0"
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # PDF reports written by generate_*_report()
    report_output_dir: str = "output"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
