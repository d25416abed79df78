#!/usr/bin/env python3
"""
Engine Smoke Test Script
========================

Standalone script to check the engine and motion pipeline end to end.

This script:
    1. Starts the configured engine (ViZDoom or synthetic)
    2. Plays one episode, or stops after a tick limit
    3. Logs pipeline stats every N ticks
    4. Reports final summary

Prerequisites:
    - For the vizdoom backend: pip install vizdoom, and a scenario WAD
      reachable through config.yaml or DOOM_AGENT_SCENARIO_PATH

Usage:
    python scripts/smoke_test.py --engine synthetic
    python scripts/smoke_test.py --config config.yaml --max-ticks 500
"""

import argparse
import logging
import os
import sys
import time

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from doom_motion_agent.config import load_config
from doom_motion_agent.main import create_engine, create_processor
from doom_motion_agent.observability import EpisodeAnalytics


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def run_smoke_test(
    config_path: str,
    engine_backend: str,
    max_ticks: int,
    report_interval: int,
) -> dict:
    """
    Run the smoke test.

    Args:
        config_path: Path to config.yaml (None to search)
        engine_backend: Override for engine.backend (None to keep)
        max_ticks: Stop after this many ticks
        report_interval: Ticks between progress reports

    Returns:
        Final metrics dict
    """
    settings = load_config(config_path)
    if engine_backend:
        data = settings.model_dump()
        data["engine"]["backend"] = engine_backend
        settings = settings.model_validate(data)

    logger.info("=" * 60)
    logger.info("Engine Smoke Test")
    logger.info("=" * 60)
    logger.info(f"Engine: {settings.engine.backend}")
    logger.info(f"Preset: {settings.vision.preset}")
    logger.info(f"Max ticks: {max_ticks}")
    logger.info("=" * 60)

    engine = create_engine(settings)
    processor = create_processor(settings)
    analytics = EpisodeAnalytics()

    start_time = time.time()
    frames_processed = 0

    try:
        engine.new_episode()
        while not engine.is_episode_finished() and frames_processed < max_ticks:
            frame = engine.acquire()
            result = processor.update(frame)
            reward = engine.submit(result.selection.vector)
            analytics.record(result, reward)
            frames_processed += 1

            if frames_processed % report_interval == 0:
                elapsed = time.time() - start_time
                logger.info("-" * 40)
                logger.info(f"Progress Report (tick {frames_processed})")
                logger.info(f"  Frame size: {frame.width}x{frame.height}")
                logger.info(f"  Ticks/s: {frames_processed / elapsed:.1f}")
                logger.info(f"  Labels: {result.label_count}")
                logger.info(f"  Kept blobs: {len(result.kept_blobs)}")
                logger.info(f"  Action: {result.selection.kind.value}")

    except KeyboardInterrupt:
        logger.info("Test interrupted by user")
    finally:
        summary = analytics.snapshot(engine.total_reward())
        engine.close()

    total_time = time.time() - start_time
    tick_rate = frames_processed / total_time if total_time > 0 else 0

    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total runtime: {total_time:.1f} seconds")
    logger.info(f"Frames processed: {frames_processed}")
    logger.info(f"Average ticks/s: {tick_rate:.1f}")
    logger.info(f"Total reward: {summary.total_reward}")
    logger.info(f"Reward from actions: {summary.action_reward}")
    logger.info(f"Actions: {summary.action_counts}")
    logger.info(f"Reasons: {summary.reason_counts}")
    logger.info(f"Mean blobs per tick: {summary.mean_blobs_per_tick:.2f}")
    logger.info("=" * 60)

    if frames_processed > 0:
        logger.info("TEST PASSED - Frames processed successfully")
    else:
        logger.error("TEST FAILED - No frames processed")

    return {
        "duration": total_time,
        "frames_processed": frames_processed,
        "ticks_per_second": tick_rate,
        "total_reward": summary.total_reward,
        "action_counts": summary.action_counts,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Smoke test for the engine and motion pipeline"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: search common locations)",
    )
    parser.add_argument(
        "--engine",
        choices=["vizdoom", "synthetic"],
        default=None,
        help="Engine backend override",
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=1000,
        help="Stop after this many ticks (default: 1000)",
    )
    parser.add_argument(
        "--report-interval",
        type=int,
        default=100,
        help="Ticks between progress reports (default: 100)",
    )
    args = parser.parse_args()

    results = run_smoke_test(
        config_path=args.config,
        engine_backend=args.engine,
        max_ticks=args.max_ticks,
        report_interval=args.report_interval,
    )

    sys.exit(0 if results["frames_processed"] > 0 else 1)


if __name__ == "__main__":
    main()
