"""Application configuration loaded from environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Workbook
    workbook_path: str = "credentials.xlsm"

    # Layout (sheet names, header rows, column headings)
    layouts_dir: str = "layouts"
    layout_name: str = "edcl"

    # Vocabulary mappings: "static" uses the built-in tables, "yaml" reads files
    vocabulary_source: str = "static"
    vocabularies_dir: str = "vocabularies"

    # Assembly
    positional_fast_path: bool = False
    max_assessment_depth: int = 32

    # Backend
    backend_host: str = "0.0.0.0"
    backend_port: int = 9200

    @property
    def project_root(self) -> Path:
        return Path(__file__).parent.parent.parent

    model_config = {"env_file": ".env", "env_prefix": "CREDENTIALS_", "extra": "ignore"}


settings = Settings()
