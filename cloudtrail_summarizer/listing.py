import threading
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from .config import DEFAULT_PAGE_SIZE
from .errors import ListError


@dataclass(frozen=True)
class ListingPage:
    keys: Tuple[str, ...]
    truncated: bool
    cursor: Optional[str] = None


def key_prefix(prefix: str, region: str, year_month: str) -> str:
    """<prefix><region>/<yyyy>/<mm>/ . year_month is not validated here."""
    return prefix + region + "/" + year_month[0:4] + "/" + year_month[4:6] + "/"


def list_page(
    s3,
    bucket: str,
    prefix: str,
    region: str,
    year_month: str,
    cursor: Optional[str] = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ListingPage:
    full_prefix = key_prefix(prefix, region, year_month)
    kwargs = {"Bucket": bucket, "Prefix": full_prefix, "MaxKeys": page_size}
    if cursor:
        kwargs["ContinuationToken"] = cursor
    try:
        resp = s3.list_objects_v2(**kwargs)
    except (ClientError, BotoCoreError) as e:
        raise ListError(f"unable to list s3://{bucket}/{full_prefix}: {e}", bucket=bucket, prefix=full_prefix) from e

    keys = tuple(obj["Key"] for obj in resp.get("Contents", []))
    truncated = bool(resp.get("IsTruncated", False))
    next_cursor = resp.get("NextContinuationToken") if truncated else None
    if truncated and not next_cursor:
        raise ListError(
            f"listing of s3://{bucket}/{full_prefix} is truncated but has no continuation token",
            bucket=bucket,
            prefix=full_prefix,
        )
    return ListingPage(keys=keys, truncated=truncated, cursor=next_cursor)


def iter_pages(
    s3,
    bucket: str,
    prefix: str,
    region: str,
    year_month: str,
    page_size: int = DEFAULT_PAGE_SIZE,
    stop_event: Optional[threading.Event] = None,
) -> Iterator[ListingPage]:
    """Follow the continuation token until a page comes back untruncated."""
    cursor = None
    while True:
        if stop_event is not None and stop_event.is_set():
            return
        page = list_page(s3, bucket, prefix, region, year_month, cursor=cursor, page_size=page_size)
        yield page
        if not page.truncated:
            return
        cursor = page.cursor


def iter_keys(
    s3,
    bucket: str,
    prefix: str,
    region: str,
    year_month: str,
    page_size: int = DEFAULT_PAGE_SIZE,
    stop_event: Optional[threading.Event] = None,
    on_page: Optional[Callable[[ListingPage], None]] = None,
) -> Iterator[str]:
    """Keys of every page in listing order. on_page sees each page before its keys are yielded."""
    for page in iter_pages(s3, bucket, prefix, region, year_month, page_size=page_size, stop_event=stop_event):
        if on_page is not None:
            on_page(page)
        yield from page.keys
