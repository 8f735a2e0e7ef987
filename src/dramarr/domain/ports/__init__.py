from .extractor import (
    ExternalExtractorPort,
    HosterExtractorPort,
    LinkSink,
    SubtitleSink,
)
from .page_fetcher import PageFetcherPort

__all__ = [
    "ExternalExtractorPort",
    "HosterExtractorPort",
    "LinkSink",
    "PageFetcherPort",
    "SubtitleSink",
]
