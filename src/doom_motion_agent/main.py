"""
DoomMotionAgent Main Application
================================

Command-line entry point for the motion agent.

Pipeline per tick:
    engine -> ChangeDetector -> BlobExtractor -> filter_blobs
           -> action policy -> engine

Usage:
    doom-motion-agent --engine synthetic --episodes 3
    doom-motion-agent --config config.yaml --preset motion_fine --show-window
"""

import argparse
import logging
import signal
import sys
from typing import List, Optional, Union

from doom_motion_agent.acquisition.decoder import DimensionMismatchError
from doom_motion_agent.config import Settings, load_config, setup_logging
from doom_motion_agent.engine import (
    DoomEngine,
    EngineUnavailableError,
    SyntheticEngine,
)
from doom_motion_agent.models.action import ActionSet
from doom_motion_agent.observability import LabelVisualizer
from doom_motion_agent.policy import CentroidActionSelector, RandomActionSelector
from doom_motion_agent.runner import EpisodeRunner
from doom_motion_agent.signals import MotionSignalProcessor, PipelineConfigError
from doom_motion_agent.vision import BlobExtractor, ChangeDetector


logger = logging.getLogger(__name__)


# =============================================================================
# Component Factories
# =============================================================================

def create_engine(settings: Settings) -> Union[DoomEngine, SyntheticEngine]:
    """
    Create engine based on config.

    Fails fast if the backend is unknown.
    """
    backend = settings.engine.backend

    if backend == "synthetic":
        synthetic = settings.engine.synthetic
        logger.info("Using SyntheticEngine")
        return SyntheticEngine(
            width=synthetic.width,
            height=synthetic.height,
            button_count=len(settings.engine.buttons),
            episode_length=synthetic.episode_length,
            target_size=synthetic.target_size,
            sweep_period=synthetic.sweep_period,
            step_reward=synthetic.step_reward,
            screen_format=settings.engine.screen_format,
        )

    elif backend == "vizdoom":
        logger.info("Using DoomEngine")
        return DoomEngine(settings.engine)

    else:
        raise ValueError(f"Unknown engine backend: {backend}")


def create_action_set(settings: Settings) -> ActionSet:
    """Fixed action vectors from config."""
    actions = settings.policy.actions
    return ActionSet.from_lists(
        turn_left=actions.turn_left,
        turn_right=actions.turn_right,
        fire=actions.fire,
    )


def create_policy(settings: Settings) -> Union[CentroidActionSelector, RandomActionSelector]:
    """Create the action selector based on config."""
    actions = create_action_set(settings)

    if settings.policy.mode == "random":
        return RandomActionSelector(actions, seed=settings.policy.seed)
    return CentroidActionSelector(actions, margin=settings.margin)


def create_processor(settings: Settings) -> MotionSignalProcessor:
    """Create the per-run motion pipeline."""
    vision = settings.vision
    return MotionSignalProcessor(
        detector=ChangeDetector(mode=vision.mode, threshold=vision.threshold),
        extractor=BlobExtractor(
            max_distance=vision.cluster_distance,
            truncate_centroids=vision.truncate_centroids,
        ),
        policy=create_policy(settings),
        hud_cutoff_ratio=vision.hud_cutoff_ratio,
        log_every_n_ticks=settings.observability.log_every_n_ticks,
    )


def create_visualizer(settings: Settings) -> LabelVisualizer:
    """Create the (gated) debug window."""
    return LabelVisualizer(
        enabled=settings.observability.show_window,
        window_name=settings.observability.window_name,
        wait_key_ms=settings.observability.wait_key_ms,
        margin=settings.margin,
        hud_cutoff_ratio=settings.vision.hud_cutoff_ratio,
        seed=settings.policy.seed,
    )


# =============================================================================
# Command Line
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doom-motion-agent",
        description="Steer a ViZDoom player toward on-screen motion",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: search common locations)",
    )
    parser.add_argument(
        "--episodes",
        type=int,
        default=None,
        help="Episodes to play (default: runner.episodes)",
    )
    parser.add_argument(
        "--engine",
        choices=["vizdoom", "synthetic"],
        default=None,
        help="Engine backend (default: engine.backend)",
    )
    parser.add_argument(
        "--preset",
        default=None,
        help="Vision preset: motion, motion_fine or brightness",
    )
    parser.add_argument(
        "--show-window",
        action="store_true",
        help="Show the label debug window",
    )
    return parser


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with command-line values applied on top."""
    data = settings.model_dump()

    if args.episodes is not None:
        data["runner"]["episodes"] = args.episodes
    if args.engine is not None:
        data["engine"]["backend"] = args.engine
    if args.preset is not None:
        # Preset constants replace the current ones
        for key in ("mode", "threshold", "cluster_distance"):
            data["vision"].pop(key, None)
        data["vision"]["preset"] = args.preset
    if args.show_window:
        data["observability"]["show_window"] = True

    return Settings.model_validate(data)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the agent.

    Returns:
        Process exit code (0 on success, 1 on a fatal error)
    """
    args = build_parser().parse_args(argv)

    try:
        settings = apply_cli_overrides(load_config(args.config), args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    setup_logging(settings)

    logger.info(f"Starting {settings.agent.name} {settings.agent.version}")

    try:
        engine = create_engine(settings)
        processor = create_processor(settings)
    except (ImportError, ValueError, PipelineConfigError, EngineUnavailableError) as e:
        logger.error(f"Startup failed: {e}")
        return 1

    visualizer = create_visualizer(settings)
    runner = EpisodeRunner(
        engine=engine,
        processor=processor,
        visualizer=visualizer if visualizer.is_enabled else None,
        tick_sleep_ms=settings.runner.tick_sleep_ms,
        reset_reference_on_episode=settings.runner.reset_reference_on_episode,
    )

    def _handle_stop(signum, frame):
        logger.info(f"Received signal {signum}, stopping after current tick...")
        runner.request_stop()

    previous_handlers = {
        signum: signal.signal(signum, _handle_stop)
        for signum in (signal.SIGTERM, signal.SIGINT)
    }

    exit_code = 0
    try:
        summaries = runner.run(settings.runner.episodes)
        logger.info(f"Played {len(summaries)} episodes")
    except (EngineUnavailableError, DimensionMismatchError) as e:
        logger.error(f"Fatal error: {e}")
        exit_code = 1
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)
        visualizer.close()
        engine.close()

    logger.info("Shutdown complete")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
