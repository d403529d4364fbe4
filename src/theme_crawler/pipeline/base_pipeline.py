"""
Pipeline Manager - Runs barrier stages in order over one entry collection
File: src/theme_crawler/pipeline/base_pipeline.py
"""
from typing import List, Dict, Any, Optional, Callable
import logging
import time
from .stage import PipelineStage
from .pipeline_data import ThemeEntry


Checkpoint = Callable[[str], None]


class PipelineManager:
    """
    Runs each stage to completion before the next one starts.

    The checkpoint callback receives the name of every stage that finished
    without a fatal error, so a later failure keeps earlier progress.
    """

    def __init__(self, checkpoint: Optional[Checkpoint] = None):
        self.stages: List[PipelineStage] = []
        self.checkpoint = checkpoint
        self.completed: List[str] = []
        self.runtime = 0.0
        self.logger = logging.getLogger("pipeline.manager")

    def add_stage(self, stage: PipelineStage) -> None:
        if any(s.name == stage.name for s in self.stages):
            raise ValueError(f"Duplicate stage name: {stage.name}")
        self.stages.append(stage)
        self.logger.debug(f"Stage '{stage.name}' appended ({stage.num_workers} workers)")

    def build_pipeline(self, stages: List[PipelineStage]) -> None:
        """Replace the stage list, in run order."""
        self.stages = []
        for stage in stages:
            self.add_stage(stage)
        self.logger.info("Pipeline: " + " -> ".join(s.name for s in self.stages))

    def run(self, entries: List[ThemeEntry]) -> List[ThemeEntry]:
        """
        Run every stage over the entries.

        Raises:
            RuntimeError: If no stages were added
            Exception: Whatever fatal error a stage re-raised
        """
        if not self.stages:
            raise RuntimeError("No stages in pipeline")

        self.completed = []
        started = time.time()
        try:
            for stage in self.stages:
                pending = sum(1 for e in entries if stage.should_process(e))
                self.logger.info(f"Stage '{stage.name}': {pending} of {len(entries)} entries to process")
                entries = stage.run(entries)
                self.completed.append(stage.name)
                if self.checkpoint is not None:
                    self.checkpoint(stage.name)
        finally:
            self.runtime = time.time() - started

        self.logger.info(f"Pipeline completed in {self.runtime:.2f}s")
        return entries

    def get_overall_stats(self) -> Dict[str, Any]:
        totals = {'processed': 0, 'skipped': 0, 'errors': 0}
        for stage in self.stages:
            totals['processed'] += stage.processed_count
            totals['skipped'] += stage.skipped_count
            totals['errors'] += stage.error_count

        return {
            'pipeline': {
                'runtime_seconds': round(self.runtime, 2),
                'stages': len(self.stages),
                'completed': list(self.completed),
            },
            'totals': totals,
        }

    def get_stage_stats(self) -> List[Dict[str, Any]]:
        return [stage.get_stats() for stage in self.stages]
