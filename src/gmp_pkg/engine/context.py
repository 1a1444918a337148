"""Run context for scenario execution."""

from __future__ import annotations
import time
from typing import Dict, Any, Optional
from pathlib import Path
import structlog


class RunContext:
    """Context for a scenario run with logging, timing and artifact paths."""
    
    def __init__(
        self,
        run_id: str,
        artifact_dir: Optional[Path] = None,
        logger: Optional[structlog.BoundLogger] = None
    ):
        self.run_id = run_id
        self.artifact_dir = Path(artifact_dir) if artifact_dir else Path("results")
        
        if logger is None:
            self.logger = structlog.get_logger().bind(run_id=run_id)
        else:
            self.logger = logger.bind(run_id=run_id)
        
        self._start_time: Optional[float] = None
        self._runtime: float = 0.0
        
        self.metadata: Dict[str, Any] = {"run_id": run_id}
    
    def start_run(self) -> None:
        """Mark start of run execution."""
        self._start_time = time.perf_counter()
        self.logger.info("Scenario run started")
    
    def end_run(self) -> float:
        """Mark end of run execution and return total runtime.
        
        Returns:
            Total runtime in seconds
        """
        if self._start_time is None:
            return 0.0
        
        self._runtime = time.perf_counter() - self._start_time
        self.logger.info("Scenario run completed", runtime_s=self._runtime)
        return self._runtime
    
    def get_artifact_path(self, filename: str) -> Path:
        """Get path for an artifact file, creating the run directory.
        
        Args:
            filename: Name of the artifact file
            
        Returns:
            Full path to the artifact file
        """
        run_dir = self.artifact_dir / self.run_id
        run_dir.mkdir(parents=True, exist_ok=True)
        return run_dir / filename
    
    def get_runtime_metadata(self) -> Dict[str, Any]:
        """Get runtime metadata for this execution."""
        metadata = self.metadata.copy()
        metadata["total_runtime_s"] = self._runtime
        return metadata
