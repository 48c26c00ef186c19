from pydantic_settings import BaseSettings
from typing import List, Optional, Union
import os
import json


class Settings(BaseSettings):
    database_url: str
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    log_level: str = "INFO"
    environment: str = "local"
    api_prefix: str = "/api/products"
    # CORS origins - can be JSON array or comma-separated string
    cors_origins: Union[List[str], str] = ["*"]
    db_pool_size: int = 10
    db_max_overflow: int = 20
    # Only applied on PostgreSQL connections
    db_schema: str = "public"

    # Image intake
    upload_dir: str = "uploads/products"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Catalog defaults
    default_category: str = "general"
    default_price: float = 0
    default_quantity: int = 1
    default_page_size: int = 10
    max_page_size: int = 100
    related_products_limit: Optional[int] = None

    # Access control
    admin_role: str = "admin"

    # Logging control
    request_logging: bool = False

    def get_cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list from JSON or comma-separated input."""
        if isinstance(self.cors_origins, str):
            try:
                origins = json.loads(self.cors_origins)
            except (json.JSONDecodeError, ValueError):
                origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        else:
            origins = self.cors_origins

        return origins if isinstance(origins, list) else [origins]

    class Config:
        env_file = f"config/{os.getenv('ENV', 'local')}.env"
        case_sensitive = False


settings = Settings()
