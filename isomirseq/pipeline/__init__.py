"""Run orchestration helpers.

Example Usage
-------------
>>> from isomirseq.pipeline import PipelineLogger
>>> plog = PipelineLogger("logs/")
>>> plog.setup()
"""

from .logger import (
    ColoredFormatter,
    PipelineLogger,
)

__all__ = [
    "ColoredFormatter",
    "PipelineLogger",
]
