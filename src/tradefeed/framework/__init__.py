"""tradefeed framework - pipeline base types."""

from tradefeed.framework.pipelines import Pipeline, PipelineResult, PipelineStatus

__all__ = ["Pipeline", "PipelineResult", "PipelineStatus"]
