from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000
    api_prefix: str = "/api"

    max_file_size_bytes: int = 10 * 1024 * 1024
    min_file_size_bytes: int = 100

    storage_backend: str = "minio"
    storage_list_page_size: int = 1000
    local_storage_root: str = "./data"

    minio_endpoint: str = ""
    minio_access_key: str = ""
    minio_secret_key: str = ""
    minio_bucket_name: str = ""
    minio_region: str = ""
    minio_secure: bool = False

    ocr_engine: str = "mistral"
    ocr_include_images: bool = True
    ocr_processing_mode: str = "background"
    ocr_worker_threads: int = 4

    mistral_api_key: str = ""
    mistral_base_url: str = "https://api.mistral.ai"
    mistral_ocr_model: str = "mistral-ocr-latest"
    mistral_timeout_seconds: int = 120
