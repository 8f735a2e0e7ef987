from .catalog import CatalogEntry, CatalogSection, ContentType, Episode, ShowStatus
from .media import (
    CandidateOutcome,
    CandidateReference,
    CandidateStatus,
    ExternalOrigin,
    Origin,
    ResolutionResult,
    ResolvedLink,
    ResolvedSubtitle,
    SpecialOrigin,
    StreamQuality,
    TrackRecord,
    VariantRecord,
)

__all__ = [
    "CandidateOutcome",
    "CandidateReference",
    "CandidateStatus",
    "CatalogEntry",
    "CatalogSection",
    "ContentType",
    "Episode",
    "ExternalOrigin",
    "Origin",
    "ResolutionResult",
    "ResolvedLink",
    "ResolvedSubtitle",
    "ShowStatus",
    "SpecialOrigin",
    "StreamQuality",
    "TrackRecord",
    "VariantRecord",
]
