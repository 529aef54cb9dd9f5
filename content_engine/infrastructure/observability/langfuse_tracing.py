# Langfuse integration
from typing import Dict, Any, Optional
import structlog
from langfuse import Langfuse

logger = structlog.get_logger(__name__)


class GenerationTracer:
    """Traces generation calls to Langfuse; a no-op unless keys are configured"""

    def __init__(
        self,
        public_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        host: Optional[str] = None,
        environment: str = "development"
    ):
        self.environment = environment
        self.langfuse: Optional[Langfuse] = None
        if public_key and secret_key:
            self.langfuse = Langfuse(
                public_key=public_key,
                secret_key=secret_key,
                host=host
            )

    @property
    def enabled(self) -> bool:
        return self.langfuse is not None

    def trace_generation(
        self,
        project_id: str,
        stage: str,
        content_type: str,
        prompt: str,
        output: Optional[str],
        duration_ms: float,
        error: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """Record one backend call; tracing failures never reach the caller"""

        if not self.langfuse:
            return

        try:
            trace = self.langfuse.trace(
                name="content_generation",
                session_id=f"project_{project_id}",
                tags=[self.environment, stage, content_type],
                metadata={"project_id": project_id, "stage": stage, "content_type": content_type}
            )
            trace.generation(
                name=f"stage_{stage}",
                input=prompt,
                output=output if error is None else error,
                level="ERROR" if error else "DEFAULT",
                metadata={
                    "duration_ms": duration_ms,
                    "success": error is None,
                    **(metadata or {})
                }
            )
        except Exception as e:
            logger.warning("Failed to record generation trace", stage=stage, error=str(e))

    def flush(self):
        """Flush pending traces"""

        if not self.langfuse:
            return
        try:
            self.langfuse.flush()
        except Exception as e:
            logger.warning("Failed to flush traces", error=str(e))
