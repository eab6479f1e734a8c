"""Context object shared across worker threads."""

from dataclasses import dataclass, field
from typing import Optional

from microserve.bootstrap.config import ServerConfig
from microserve.lifecycle.state import ServerLifecycle
from microserve.pipeline.router import Router


@dataclass
class WorkerContext:
    """Dependencies shared read-only by connection workers."""

    router: Router
    config: ServerConfig = field(default_factory=ServerConfig)
    lifecycle: Optional[ServerLifecycle] = None
