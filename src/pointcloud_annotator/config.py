"""Runtime settings read from the environment (and an optional .env file)."""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

STORE_BACKENDS = ("memory", "json", "dynamodb")

# Project root sits two levels above the package directory (src/<package>).
DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass(frozen=True)
class Settings:
    store: str = field(default_factory=lambda: os.getenv("ANNOTATOR_STORE", "json"))
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("ANNOTATOR_DATA_DIR", str(DEFAULT_DATA_DIR)))
    )

    # DynamoDB
    table_name: str = field(default_factory=lambda: os.getenv("ANNOTATIONS_TABLE", "annotations"))
    aws_region: str = field(default_factory=lambda: os.getenv("AWS_REGION", "us-east-1"))
    dynamodb_endpoint: Optional[str] = field(
        default_factory=lambda: os.getenv("DYNAMODB_ENDPOINT") or None
    )

    # API server
    host: str = field(default_factory=lambda: os.getenv("ANNOTATOR_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("ANNOTATOR_PORT", 8000))

    # Viewer
    api_url: str = field(
        default_factory=lambda: os.getenv("ANNOTATOR_API_URL", "http://localhost:8000")
    )

    log_level: str = field(default_factory=lambda: os.getenv("ANNOTATOR_LOG_LEVEL", "INFO"))

    def __post_init__(self) -> None:
        if self.store not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown store backend {self.store!r}; expected one of {', '.join(STORE_BACKENDS)}"
            )

    def with_overrides(self, **overrides) -> "Settings":
        """Copy with every non-None override applied (CLI flags win over env)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
