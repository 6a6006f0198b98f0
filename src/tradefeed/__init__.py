"""
tradefeed - fixed-width trade feed decoding, validation and reporting.

Packages:
- tradefeed.core: errors, findings, logging, timing, settings
- tradefeed.framework: pipeline base types
- tradefeed.feed: the trade feed domain (decoder, records, validators,
  sorting, reports, pipeline)
"""

__version__ = "0.3.0"
