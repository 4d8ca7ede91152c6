"""Pipeline stages.

One module per external tool invocation, in execution order:
compile, adapt, introspect, publish.
"""

from __future__ import annotations

from levo_build.stages.adapt import AdaptStage
from levo_build.stages.base import BaseStage
from levo_build.stages.compile import CompileStage
from levo_build.stages.introspect import IntrospectStage
from levo_build.stages.publish import PublishStage

__all__ = [
    "AdaptStage",
    "BaseStage",
    "CompileStage",
    "IntrospectStage",
    "PublishStage",
]
