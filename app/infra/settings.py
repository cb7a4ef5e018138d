from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    fo_env: str = "dev"

    # Postgres in production; sqlite keeps local runs and tests self-contained
    fo_db_url: str = "sqlite:///./data/fo.db"

    # --- SODA3 (datos.gov.co FIC returns) ---
    soda3_base_url: str = "https://www.datos.gov.co/resource/qhpu-8ixx.json"
    soda3_app_token: str | None = None
    soda3_cache_ttl_seconds: int = 3600
    soda3_timeout_seconds: float = 30.0

    # fund matching
    soda3_match_prefix_len: int = 15
    soda3_match_country: str = "Colombia"

    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
