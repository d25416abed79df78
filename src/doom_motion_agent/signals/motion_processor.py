"""
Motion Signal Processor
=======================

Runs the per-tick motion pipeline for one session.

This processor:
    - Owns the ChangeDetector and therefore the reference frame
    - Extracts blobs from the motion mask
    - Drops blobs below the HUD cutoff
    - Asks the policy for an action

Key Design Decisions:
    - The reference frame lives on this object, never in module state
    - An empty blob set is a normal outcome handled by the policy
    - Malformed frames are fatal (DimensionMismatchError propagates)
"""

import logging
from typing import Optional

from doom_motion_agent.acquisition.frame import Frame
from doom_motion_agent.models.tick import TickResult
from doom_motion_agent.policy.selector import ActionPolicy
from doom_motion_agent.vision.blob_filter import DEFAULT_CUTOFF_RATIO, filter_blobs
from doom_motion_agent.vision.blobs import BlobExtractor
from doom_motion_agent.vision.change_detector import ChangeDetector


logger = logging.getLogger(__name__)


class PipelineConfigError(Exception):
    """Raised when pipeline parameters are invalid."""
    pass


class MotionSignalProcessor:
    """
    Per-run motion pipeline: detect -> extract -> filter -> select.

    Attributes:
        detector: Change detector holding the reference frame
        extractor: Blob extractor
        policy: Action selector
        hud_cutoff_ratio: Fraction of the height below which blobs are ignored
    """

    def __init__(
        self,
        detector: ChangeDetector,
        extractor: BlobExtractor,
        policy: ActionPolicy,
        hud_cutoff_ratio: float = DEFAULT_CUTOFF_RATIO,
        log_every_n_ticks: int = 100,
    ) -> None:
        """
        Initialize motion signal processor.

        Args:
            detector: Change detector
            extractor: Blob extractor
            policy: Action selector
            hud_cutoff_ratio: HUD cutoff as a fraction of frame height
            log_every_n_ticks: Logging interval

        Raises:
            PipelineConfigError: If parameters are invalid
        """
        self._validate_parameters(hud_cutoff_ratio, log_every_n_ticks)

        self.detector = detector
        self.extractor = extractor
        self.policy = policy
        self.hud_cutoff_ratio = hud_cutoff_ratio
        self.log_every_n_ticks = log_every_n_ticks

        self._tick_count: int = 0
        self._last_result: Optional[TickResult] = None

        logger.info(
            f"MotionSignalProcessor initialized: "
            f"mode={detector.mode.value}, d={detector.threshold}, "
            f"dst={extractor.max_distance}, cutoff={hud_cutoff_ratio}"
        )

    @staticmethod
    def _validate_parameters(cutoff_ratio: float, log_every: int) -> None:
        """Validate parameters at startup. Fail fast."""
        errors = []

        if not 0 < cutoff_ratio <= 1:
            errors.append(f"hud_cutoff_ratio must be in (0, 1], got {cutoff_ratio}")
        if log_every < 1:
            errors.append(f"log_every_n_ticks must be >= 1, got {log_every}")

        if errors:
            raise PipelineConfigError(
                "Pipeline parameter validation failed:\n" + "\n".join(errors)
            )

    def update(self, frame: Frame) -> TickResult:
        """
        Process one frame.

        Args:
            frame: Decoded frame from the engine

        Returns:
            TickResult with mask, blobs and the selected action

        Raises:
            DimensionMismatchError: If the frame is malformed or changed size
        """
        self._tick_count += 1

        mask = self.detector.detect(frame.pixels)
        extraction = self.extractor.extract(mask)
        kept = filter_blobs(extraction.blobs, frame.height, self.hud_cutoff_ratio)
        selection = self.policy.select(
            kept,
            frame.width,
            extracted_count=extraction.n_labels,
        )

        result = TickResult(
            tic=frame.tic,
            mask=mask,
            points=extraction.points,
            labels=extraction.labels,
            blobs=extraction.blobs,
            kept_blobs=kept,
            selection=selection,
        )
        self._last_result = result

        logger.debug(
            f"tic={frame.tic} labels={extraction.n_labels} kept={len(kept)} "
            f"action={selection.kind.value} reason={selection.reason.value}"
        )

        if self._tick_count % self.log_every_n_ticks == 0:
            logger.info(
                f"Motion [tick {self._tick_count}]: "
                f"points={len(extraction.points)}, labels={extraction.n_labels}, "
                f"kept={len(kept)}, action={selection.kind.value}"
            )

        return result

    @property
    def last_result(self) -> Optional[TickResult]:
        """Result of the most recent tick."""
        return self._last_result

    @property
    def tick_count(self) -> int:
        """Number of frames processed."""
        return self._tick_count

    def reset(self) -> None:
        """Forget the reference frame and counters."""
        self.detector.reset()
        self._tick_count = 0
        self._last_result = None
        logger.info("MotionSignalProcessor reset")

    def get_metrics(self) -> dict:
        """Get processor metrics for observability."""
        last = self._last_result
        return {
            "tick_count": self._tick_count,
            "last_label_count": last.label_count if last else 0,
            "last_kept_count": len(last.kept_blobs) if last else 0,
            "last_action": last.selection.kind.value if last else None,
        }
