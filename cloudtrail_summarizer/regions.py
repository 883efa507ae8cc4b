from typing import Iterable, List

from botocore.exceptions import BotoCoreError, ClientError

from .errors import CatalogError


def unique_preserving_order(seq: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for s in seq:
        if s not in seen:
            seen.add(s)
            out.append(s)
    return out


class StaticRegionCatalog:
    """A fixed list of regions. Used for --regions and in tests."""

    def __init__(self, regions: Iterable[str]):
        self._regions = unique_preserving_order(r.strip() for r in regions if r and r.strip())

    def regions(self) -> List[str]:
        if not self._regions:
            raise CatalogError("no regions given")
        return list(self._regions)


class SessionRegionCatalog:
    """Regions of one partition, read from the endpoint data bundled with botocore."""

    def __init__(self, session, partition: str = "aws", service: str = "s3"):
        self.session = session
        self.partition = partition
        self.service = service

    def regions(self) -> List[str]:
        return list_regions(self.session, self.partition, self.service)


def list_regions(session, partition: str = "aws", service: str = "s3") -> List[str]:
    try:
        partitions = session.get_available_partitions()
        if partition not in partitions:
            raise CatalogError(f"failed to get regions: partition {partition!r} not found in {partitions}")
        regions = session.get_available_regions(service, partition_name=partition)
    except (BotoCoreError, ClientError) as e:
        raise CatalogError(f"failed to get regions: {e}") from e
    if not regions:
        raise CatalogError(f"failed to get regions: partition {partition!r} has no {service} regions")
    return unique_preserving_order(regions)
