from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    APP_NAME: str = "OpenDrive"
    APP_ENV: Literal["dev", "prod"] = "dev"
    APP_DEBUG: bool = False
    APP_MAX_FILE_SIZE: int = 104857600  # 100MB

    model_config = SettingsConfigDict(env_file=".env", env_prefix="APP_")


class MongoSettings(BaseSettings):
    MONGO_HOST: str = ""
    MONGO_PORT: int = 27017
    MONGO_DB: str = "opendrive"
    MONGO_USER: str = ""
    MONGO_PWD: str = ""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="MONGO_")

    @property
    def MONGO_URL(self) -> str:
        host = self.MONGO_HOST or "localhost"
        port = self.MONGO_PORT or 27017
        if self.MONGO_USER and self.MONGO_PWD:
            return f"mongodb://{self.MONGO_USER}:{self.MONGO_PWD}@{host}:{port}"
        return f"mongodb://{host}:{port}"


class StorageSettings(BaseSettings):
    STORAGE_PROVIDER: str = "local"
    STORAGE_PATH: str = "./uploads"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="STORAGE_")


class S3Settings(BaseSettings):
    S3_ENDPOINT: str = ""
    S3_REGION: str = "us-east-1"
    S3_ACCESS_KEY: str = ""
    S3_SECRET_KEY: str = ""
    S3_BUCKET: str = "drive"

    @property
    def S3_SSL(self) -> bool:
        # AWS itself is always https; explicit endpoints carry their scheme
        return not self.S3_ENDPOINT or self.S3_ENDPOINT.startswith("https://")

    @property
    def S3_HOST(self) -> str:
        if not self.S3_ENDPOINT:
            return "s3.amazonaws.com"
        return self.S3_ENDPOINT.replace("http://", "").replace("https://", "").rstrip("/")

    model_config = SettingsConfigDict(env_file=".env", env_prefix="S3_")


class GCSSettings(BaseSettings):
    GCS_PROJECT_ID: str | None = None
    GCS_BUCKET: str = "opendrive"
    GCS_KEYFILE: str | None = None
    GCS_STORAGE_CLASS: str = "STANDARD"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="GCS_")


class SentrySettings(BaseSettings):
    SENTRY_DSN: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2
    SENTRY_SEND_DEFAULT_PII: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SENTRY_")


class Settings(AppSettings, MongoSettings, StorageSettings, S3Settings, GCSSettings, SentrySettings):
    RELEASE: str | None = None
    model_config = SettingsConfigDict(env_file=".env", env_prefix="")


settings = Settings()
