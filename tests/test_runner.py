"""
Episode Runner Tests
====================
"""

import pytest

from doom_motion_agent.acquisition.decoder import DimensionMismatchError
from doom_motion_agent.engine import EngineUnavailableError, SyntheticEngine
from doom_motion_agent.policy.selector import CentroidActionSelector
from doom_motion_agent.runner import EpisodeRunner
from doom_motion_agent.signals.motion_processor import MotionSignalProcessor
from doom_motion_agent.vision.blobs import BlobExtractor
from doom_motion_agent.vision.change_detector import ChangeDetector


@pytest.fixture
def processor(action_set):
    return MotionSignalProcessor(
        detector=ChangeDetector(mode="temporal", threshold=120),
        extractor=BlobExtractor(max_distance=30),
        policy=CentroidActionSelector(action_set, margin=25),
    )


class FailingEngine(SyntheticEngine):
    """Synthetic engine that dies after a few ticks."""

    def __init__(self, fail_at: int, **kwargs):
        super().__init__(**kwargs)
        self.fail_at = fail_at

    def acquire(self):
        frame = super().acquire()
        if frame.tic >= self.fail_at:
            raise EngineUnavailableError("engine process exited")
        return frame


class ResizingEngine(SyntheticEngine):
    """Synthetic engine whose second episode has a different size."""

    def new_episode(self):
        super().new_episode()
        if self.episode == 1:
            self.width, self.height = 160, 120


class TestEpisodeRunner:
    """Tests for the synchronous episode loop."""

    def test_plays_requested_episodes(self, processor):
        """One summary per episode, one action per tick."""
        engine = SyntheticEngine(episode_length=5)
        runner = EpisodeRunner(engine, processor)

        summaries = runner.run(2)

        assert [s.episode for s in summaries] == [0, 1]
        for summary in summaries:
            assert summary.ticks == 5
            assert summary.total_reward == pytest.approx(-5.0)
            assert summary.action_reward == pytest.approx(summary.total_reward)
            assert sum(summary.action_counts.values()) == 5
            assert sum(summary.reason_counts.values()) == 5

    def test_submits_configured_vectors(self, processor, action_set):
        """Only the fixed action vectors reach the engine."""
        engine = SyntheticEngine(episode_length=3)
        EpisodeRunner(engine, processor).run(1)

        assert engine.last_action in {
            action_set.turn_left,
            action_set.turn_right,
            action_set.fire,
        }

    def test_first_tick_sees_the_square(self, processor):
        """The square is motion on the first tick of an episode."""
        engine = SyntheticEngine(episode_length=1)
        summary = EpisodeRunner(engine, processor).run_episode(0)

        assert summary.total_blobs == 1
        assert summary.action_counts == {"FIRE": 1}
        assert summary.reason_counts == {"TARGET_CENTERED": 1}

    def test_reference_reset_between_episodes(self, processor):
        """Each episode starts from a zero reference frame."""
        # sweep_period=2 keeps the square still
        engine = SyntheticEngine(episode_length=3, sweep_period=2)
        runner = EpisodeRunner(engine, processor, reset_reference_on_episode=True)

        summaries = runner.run(2)

        for summary in summaries:
            assert summary.total_blobs == 1
            assert summary.reason_counts == {"TARGET_CENTERED": 1, "NO_MOTION": 2}

    def test_reference_carried_over(self, processor):
        """Without a reset the last frame of an episode is the next reference."""
        engine = SyntheticEngine(episode_length=3, sweep_period=2)
        runner = EpisodeRunner(engine, processor, reset_reference_on_episode=False)

        first, second = runner.run(2)

        assert first.total_blobs == 1
        assert second.total_blobs == 0
        assert second.reason_counts == {"NO_MOTION": 3}

    def test_stop_request_skips_episodes(self, processor):
        """A stop requested before the run plays nothing."""
        engine = SyntheticEngine(episode_length=5)
        runner = EpisodeRunner(engine, processor)

        runner.request_stop()

        assert runner.stop_requested
        assert runner.run(3) == []

    def test_engine_failure_propagates(self, processor):
        """A dead engine aborts the run."""
        engine = FailingEngine(fail_at=2, episode_length=5)
        runner = EpisodeRunner(engine, processor)

        with pytest.raises(EngineUnavailableError):
            runner.run(1)

    def test_frame_size_change_propagates(self, processor):
        """A size change across episodes is fatal without a reference reset."""
        engine = ResizingEngine(episode_length=2)
        runner = EpisodeRunner(engine, processor, reset_reference_on_episode=False)

        with pytest.raises(DimensionMismatchError):
            runner.run(2)
