"""
Summarize CloudTrail logs archived in S3 into a single CSV file.

Walks every region of a partition, lists the log objects under
<prefix><region>/<yyyy>/<mm>/ page by page and writes one CSV row per event.
"""

from datetime import datetime, timezone

__version__ = "0.1.0"

LOG_PREFIX = "[cloudtrail-summarizer]"


def log(msg: str) -> None:
    ts = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    print(f"[{ts}] {LOG_PREFIX} {msg}", flush=True)
