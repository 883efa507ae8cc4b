from typing import Optional


class SummarizerError(Exception):
    """Base class for every failure the summarizer reports to the user."""


class CatalogError(SummarizerError):
    pass


class SessionError(SummarizerError):
    pass


class ListError(SummarizerError):
    def __init__(self, msg: str, bucket: str = "", prefix: str = ""):
        super().__init__(msg)
        self.bucket = bucket
        self.prefix = prefix


class FetchError(SummarizerError):
    def __init__(self, msg: str, bucket: str = "", key: Optional[str] = None):
        super().__init__(msg)
        self.bucket = bucket
        self.key = key


class ParseError(SummarizerError):
    def __init__(self, msg: str, bucket: str = "", key: Optional[str] = None):
        super().__init__(msg)
        self.bucket = bucket
        self.key = key


class SinkError(SummarizerError):
    pass
