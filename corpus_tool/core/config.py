from pydantic_settings import BaseSettings
import os


class Settings(BaseSettings):
    # MongoDB
    # Defaults to localhost for local development
    # In docker-compose, MONGODB_URL env var will override this
    mongodb_url: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017/corpora")
    mongodb_database: str = "corpora"
    mongodb_collection: str = "text-corpus"
    mongodb_timeout_ms: int = 5000  # Server selection timeout

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Recorded in every record's data lineage
    tool_name: str = "text-corpus-tool v1.0"

    # Default number of summaries returned by the document listing
    default_page_size: int = 10
    max_page_size: int = 100

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore unrelated env vars


settings = Settings()
