"""
Fetch one CloudTrail log object and project its events to flat rows.

A log object is a JSON document {"Records": [ {...event...}, ... ]}, usually
stored gzip-compressed as *.json.gz. Every event becomes one 7-field row.
Field extraction is best effort: a missing field, or one that is not a
string, becomes "" and never stops the rest of the row.
"""

import gzip
import json
import zlib
from typing import Any, List, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from .errors import FetchError, ParseError

# ---------------------------
# Output columns
# ---------------------------

# (header, path inside the event)
FIELDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("EventTime", ("eventTime",)),
    ("OperationUser", ("userIdentity", "principalId")),
    ("eventSource", ("eventSource",)),
    ("eventName", ("eventName",)),
    ("awsRegion", ("awsRegion",)),
    ("sourceIPAddress", ("sourceIPAddress",)),
    ("userAgent", ("userAgent",)),
)

HEADER: Tuple[str, ...] = tuple(name for name, _ in FIELDS)

GZIP_MAGIC = b"\x1f\x8b"

Row = Tuple[str, ...]

# ---------------------------
# Projection
# ---------------------------


def get_string(record: Any, *path: str) -> str:
    cur = record
    for step in path:
        if not isinstance(cur, dict):
            return ""
        cur = cur.get(step)
    return cur if isinstance(cur, str) else ""


def project(record: Any) -> Row:
    return tuple(get_string(record, *path) for _, path in FIELDS)


# ---------------------------
# Fetch and parse
# ---------------------------


def fetch_object(s3, bucket: str, key: str) -> bytes:
    try:
        resp = s3.get_object(Bucket=bucket, Key=key)
        return resp["Body"].read()
    except (ClientError, BotoCoreError, OSError) as e:
        raise FetchError(f"unable to get s3://{bucket}/{key}: {e}", bucket=bucket, key=key) from e


def parse_records(blob: bytes, bucket: str = "", key: str = "") -> List[Any]:
    """Decode a log object body (plain or gzipped JSON) and return its Records array."""
    try:
        if blob[:2] == GZIP_MAGIC:
            blob = gzip.decompress(blob)
        doc = json.loads(blob.decode("utf-8"))
    except (OSError, EOFError, zlib.error, UnicodeDecodeError, ValueError) as e:
        raise ParseError(f"s3://{bucket}/{key} is not a JSON log file: {e}", bucket=bucket, key=key) from e

    if not isinstance(doc, dict):
        raise ParseError(f"s3://{bucket}/{key}: top level is not an object", bucket=bucket, key=key)
    records = doc.get("Records")
    if not isinstance(records, list):
        raise ParseError(f"s3://{bucket}/{key}: missing or malformed Records array", bucket=bucket, key=key)
    return records


def extract(s3, bucket: str, key: str) -> List[Row]:
    blob = fetch_object(s3, bucket, key)
    return [project(r) for r in parse_records(blob, bucket=bucket, key=key)]
