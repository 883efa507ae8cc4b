import os
from dataclasses import dataclass

# ---------------------------
# Defaults and configuration
# ---------------------------

DEFAULT_BUCKET = os.environ.get("SUMMARIZER_BUCKET", "")
DEFAULT_PREFIX = os.environ.get("SUMMARIZER_PREFIX", "")
DEFAULT_YEAR_MONTH = os.environ.get("SUMMARIZER_YEAR_MONTH", "201801")
DEFAULT_OUTPUT_PATH = os.environ.get("SUMMARIZER_OUTPUT_PATH", "./result.csv")
DEFAULT_PAGE_SIZE = int(os.environ.get("SUMMARIZER_PAGE_SIZE", "100"))  # MaxKeys per list request
DEFAULT_WORKERS = int(os.environ.get("SUMMARIZER_WORKERS", "1"))
DEFAULT_ON_ERROR = os.environ.get("SUMMARIZER_ON_ERROR", "abort")
DEFAULT_PARTITION = os.environ.get("SUMMARIZER_PARTITION", "aws")

# Home region of the S3 client. S3 routes ListObjectsV2/GetObject to the bucket's region.
DEFAULT_SESSION_REGION = os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION") or "ap-northeast-1"

ON_ERROR_ABORT = "abort"
ON_ERROR_SKIP = "skip"
ON_ERROR_CHOICES = (ON_ERROR_ABORT, ON_ERROR_SKIP)


@dataclass(frozen=True)
class RunConfig:
    bucket: str
    prefix: str = DEFAULT_PREFIX
    year_month: str = DEFAULT_YEAR_MONTH
    output_path: str = DEFAULT_OUTPUT_PATH
    page_size: int = DEFAULT_PAGE_SIZE
    workers: int = DEFAULT_WORKERS
    on_error: str = DEFAULT_ON_ERROR

    def __post_init__(self):
        if self.on_error not in ON_ERROR_CHOICES:
            raise ValueError(f"on_error must be one of {ON_ERROR_CHOICES}, got {self.on_error!r}")
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")
        if self.workers <= 0:
            raise ValueError("workers must be positive")
