"""
app/services package marker.
"""

from app.services.deduplication_service import DeduplicationService, dedupe
from app.services.esg_pipeline import (
    DuplicateRemovalReport,
    EsgReportingPipeline,
    PipelineResult,
    get_esg_pipeline,
)
from app.services.normalization_service import NormalizationService, normalize
from app.services.query_service import QueryOptions, QueryService, query
from app.services.rollup_service import RollupService, aggregate_by_year, aggregate_overall

__all__ = [
    "DeduplicationService",
    "dedupe",
    "DuplicateRemovalReport",
    "EsgReportingPipeline",
    "PipelineResult",
    "get_esg_pipeline",
    "NormalizationService",
    "normalize",
    "QueryOptions",
    "QueryService",
    "query",
    "RollupService",
    "aggregate_by_year",
    "aggregate_overall",
]
