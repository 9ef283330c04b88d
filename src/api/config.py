"""Service configuration read from environment variables."""

import os
from pathlib import Path


class Settings:
    # Directory holding ratings.csv and products.csv
    data_dir: str = os.getenv("CORATE_DATA_DIR", "data")
    ratings_file: str = os.getenv("CORATE_RATINGS_FILE", "ratings.csv")
    products_file: str = os.getenv("CORATE_PRODUCTS_FILE", "products.csv")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Result sizes accepted by the API
    default_limit: int = int(os.getenv("CORATE_DEFAULT_LIMIT", "5"))
    max_limit: int = int(os.getenv("CORATE_MAX_LIMIT", "100"))

    def ratings_path(self, data_dir: str = None) -> Path:
        return Path(data_dir or self.data_dir) / self.ratings_file

    def products_path(self, data_dir: str = None) -> Path:
        return Path(data_dir or self.data_dir) / self.products_file


settings = Settings()
