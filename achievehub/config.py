import os

from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_PATH = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "AchieveHub"
    APP_VERSION: str = "1.0.0"
    ROOT_PATH: str = ROOT_PATH
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str = "dev-secret-key-change-me"
    DATABASE_URL: str = "sqlite:///achievehub.db"

    AUTH_COOKIE_NAME: str = "achievehub_token"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    JWT_ALGORITHM: str = "HS256"
    SESSION_COOKIE_SAMESITE: str = "Lax"
    SESSION_COOKIE_SECURE: bool = False

    # Photo bucket: files live under PHOTO_STORAGE_DIR/<bucket>/, served from PHOTO_PUBLIC_URL
    PHOTO_BUCKET: str = "achievement-photos"
    PHOTO_STORAGE_DIR: str = os.path.join(ROOT_PATH, "storage")
    PHOTO_PUBLIC_URL: str = "/storage"
    MAX_PHOTOS: int = 5
    MAX_PHOTO_BYTES: int = 10 * 1024 * 1024  # 10 MB
    ALLOWED_IMAGE_EXTS: set[str] = {"png", "jpg", "jpeg", "webp", "gif"}

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        return self.DATABASE_URL


settings = Settings()
