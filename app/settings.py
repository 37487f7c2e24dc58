from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional

APP_DIR = Path(__file__).resolve().parent

class Settings(BaseSettings):
    host: str = Field("0.0.0.0", env="HOST")
    port: int = Field(3000, env="PORT")

    pocketbase_url: str = Field("http://localhost:8080", env="POCKETBASE_URL")
    pocketbase_collection: str = Field("images", env="POCKETBASE_COLLECTION")
    pocketbase_timeout: float = Field(10.0, env="POCKETBASE_TIMEOUT")
    pocketbase_admin_email: Optional[str] = Field(None, env="POCKETBASE_ADMIN_EMAIL")
    pocketbase_admin_password: Optional[str] = Field(None, env="POCKETBASE_ADMIN_PASSWORD")

    upload_dir: Path = Field(APP_DIR / "uploads", env="UPLOAD_DIR")
    uploads_mount: str = Field("/uploads", env="UPLOADS_MOUNT")
    public_dir: Path = Field(APP_DIR / "public", env="PUBLIC_DIR")
    max_file_size: int = Field(10 * 1024 * 1024, env="MAX_FILE_SIZE")  # 10MB

    # seconds after startup before the one-shot store check
    readiness_probe_delay: float = Field(3.0, env="READINESS_PROBE_DELAY")

    app_title: str = Field("Image Gallery", env="APP_TITLE")
    log_level: str = Field("INFO", env="LOG_LEVEL")

    class Config:
        env_file = ".env"
        extra = "allow"  # tolerate unknown vars if needed

settings = Settings()
