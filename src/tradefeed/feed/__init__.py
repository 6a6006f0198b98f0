"""
Trade feed domain.

Fixed-width feed with one HEADR line, TRADE / EXTRD detail lines and one
FOOTR line. Modules, leaves first:

- schema: tags, layouts, value domains, report columns
- decoder: fixed-width field decoding and canonical formatting
- connector: buffered read and line classification
- records: immutable record models
- validators: per-record and envelope rules producing findings
- sorting: notional ordering
- reports: CSV emitters
- pipelines: FeedPipeline orchestration
"""

from tradefeed.feed.pipelines import FeedPipeline, process_feed
from tradefeed.feed.records import EnvelopeFooter, EnvelopeHeader, ExtendedTradeDetail, TradeDetail
from tradefeed.feed.schema import RecordTag

__all__ = [
    "FeedPipeline",
    "process_feed",
    "EnvelopeHeader",
    "TradeDetail",
    "ExtendedTradeDetail",
    "EnvelopeFooter",
    "RecordTag",
]
