from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./data/db.sqlite3"
    data_dir: str = "./data"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5000", "http://localhost:8000"]

    session_cookie_name: str = "vl_session"
    session_ttl_seconds: int = 7 * 24 * 60 * 60
    cookie_secure: bool = False  # True behind HTTPS

    max_upload_size_bytes: int = 10 * 1024 * 1024  # 10MB
    max_profile_picture_size_bytes: int = 5 * 1024 * 1024  # 5MB
    max_files_per_upload: int = 100
    upload_timeout_seconds: float = 30.0

    smtp_host: str = ""  # empty = notifications disabled
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    mail_from: str = "noreply@vehicle-logistics.local"

    seed_admin_username: str = "admin"
    seed_admin_password: str = "admin123"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
