"""
Region -> page -> key -> row pipeline.

Each stage is a lazy iterator over the previous one:

  regions                   (fixed list, catalog order)
    iter_pages(region)      (strictly sequential, follows the continuation token)
      page.keys             (listing order)
        extract(key)        (fetch + parse + project; with workers > 1 a bounded window of keys is in flight)
          rows              (written by the driver thread only)

The first listing, fetch or parse failure stops the whole run, unless
on_error="skip", in which case objects that cannot be fetched or parsed are
logged and skipped. Listing and output failures always stop the run.
"""

import concurrent.futures as futures
import contextlib
import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, Iterator, List, Optional

from . import log
from .config import ON_ERROR_SKIP, RunConfig
from .errors import FetchError, ParseError
from .extractor import Row, extract
from .listing import ListingPage, iter_keys
from .sink import CsvSink

# extract_key result for an object whose fetch never began because the run was stopped
NOT_STARTED = object()


@dataclass
class RunStats:
    regions: int = 0
    pages: int = 0
    objects: int = 0
    records: int = 0
    skipped: int = 0
    cancelled: bool = False


class Pipeline:
    def __init__(
        self,
        s3_client,
        sink: CsvSink,
        config: RunConfig,
        regions: Iterable[str],
        stop_event: Optional[threading.Event] = None,
    ):
        self.s3 = s3_client
        self.sink = sink
        self.config = config
        self.regions = list(regions)
        self.stop_event = stop_event or threading.Event()
        self.stats = RunStats()
        self._pool: Optional[futures.ThreadPoolExecutor] = None

    def stopped(self) -> bool:
        return self.stop_event.is_set()

    # ----- stages -----

    def _count_page(self, page: ListingPage) -> None:
        self.stats.pages += 1

    def region_keys(self, region: str) -> Iterator[str]:
        return iter_keys(
            self.s3,
            self.config.bucket,
            self.config.prefix,
            region,
            self.config.year_month,
            page_size=self.config.page_size,
            stop_event=self.stop_event,
            on_page=self._count_page,
        )

    def extract_key(self, key: str):
        """
        Rows of one object, None when the object is skipped under on_error=skip,
        or NOT_STARTED when the run was stopped before the fetch began.
        """
        if self.stopped():
            return NOT_STARTED
        try:
            return extract(self.s3, self.config.bucket, key)
        except (FetchError, ParseError) as e:
            if self.config.on_error != ON_ERROR_SKIP:
                raise
            log(f"skipping {key}: {e}")
            return None

    def key_results(self, keys: Iterable[str]) -> Iterator[Optional[List[Row]]]:
        """Per-key results in listing order. Ends at the first object not started because of a stop."""
        if self._pool is None:
            for key in keys:
                result = self.extract_key(key)
                if result is NOT_STARTED:
                    return
                yield result
            return

        window: Deque[futures.Future] = deque()
        window_size = self.config.workers * 2
        try:
            for key in keys:
                if self.stopped():
                    break
                window.append(self._pool.submit(self.extract_key, key))
                if len(window) < window_size:
                    continue
                result = window.popleft().result()
                if result is NOT_STARTED:
                    return
                yield result
            while window:
                result = window.popleft().result()
                if result is NOT_STARTED:
                    return
                yield result
        finally:
            for f in window:
                f.cancel()

    def records(self, region: str) -> Iterator[Row]:
        for rows in self.key_results(self.region_keys(region)):
            self.stats.objects += 1
            if rows is None:
                self.stats.skipped += 1
                continue
            yield from rows

    # ----- run -----

    def run(self) -> RunStats:
        if self.config.workers > 1:
            pool_cm = futures.ThreadPoolExecutor(max_workers=self.config.workers)
        else:
            pool_cm = contextlib.nullcontext()

        with self.sink, pool_cm as pool:
            self._pool = pool
            try:
                self.sink.write_header()
                for region in self.regions:
                    if self.stopped():
                        break
                    log(f"getting CloudTrail logs in region {region} ...")
                    for row in self.records(region):
                        self.sink.write_record(row)
                        self.stats.records += 1
                    if self.stopped():
                        break
                    self.stats.regions += 1
                    log(f"completed region {region}")
            finally:
                self._pool = None

        self.stats.cancelled = self.stopped()
        return self.stats
