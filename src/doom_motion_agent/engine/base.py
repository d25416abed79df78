"""
Game Engine Abstraction
=======================

The engine contract the episode runner depends on, plus a
deterministic synthetic engine.

Design Rules:
    - acquire() returns a decoded Frame (canonical RGB)
    - submit() blocks until the engine has applied the action
    - Any failure to deliver a state or accept an action raises
      EngineUnavailableError; there are no retries
"""

import logging
import math
from typing import Optional, Protocol, Sequence

import numpy as np

from doom_motion_agent.acquisition.decoder import (
    ScreenFormat,
    decode_screen_buffer,
    encode_screen_buffer,
)
from doom_motion_agent.acquisition.frame import Frame


logger = logging.getLogger(__name__)


class EngineUnavailableError(Exception):
    """Raised when the engine fails to deliver a frame or rejects an action."""
    pass


class GameEngine(Protocol):
    """
    Protocol for game engine backends.

    Implemented by:
        - DoomEngine (ViZDoom)
        - SyntheticEngine (tests and dry runs)
    """

    @property
    def screen_width(self) -> int:
        ...

    @property
    def screen_height(self) -> int:
        ...

    @property
    def button_count(self) -> int:
        ...

    def new_episode(self) -> None:
        """Start a new episode."""
        ...

    def is_episode_finished(self) -> bool:
        """Whether the current episode has ended."""
        ...

    def acquire(self) -> Frame:
        """
        Pull the current frame and per-tick state.

        Raises:
            EngineUnavailableError: If no state is available
        """
        ...

    def submit(self, action: Sequence[int]) -> float:
        """
        Apply an action for one tick.

        Args:
            action: 0/1 vector, one entry per configured button

        Returns:
            Reward for this action

        Raises:
            EngineUnavailableError: If the engine rejects the action
        """
        ...

    def total_reward(self) -> float:
        """Cumulative reward of the current episode."""
        ...

    def close(self) -> None:
        """Release engine resources."""
        ...


class SyntheticEngine:
    """
    Deterministic stand-in for the game engine.

    Renders a dark frame with one bright square sweeping horizontally
    across the upper part of the view. The square's position depends
    only on the tic, so runs are reproducible.

    The screen buffer is packed in the configured format and decoded
    back, exercising the same boundary as the real engine.

    Attributes:
        width: Frame width
        height: Frame height
        episode_length: Ticks per episode
        target_size: Side of the square in pixels
        sweep_period: Ticks per full left-right-left cycle
        step_reward: Reward returned for every action
    """

    BACKGROUND = 16
    TARGET = 255

    def __init__(
        self,
        width: int = 320,
        height: int = 240,
        button_count: int = 3,
        episode_length: int = 120,
        target_size: int = 12,
        sweep_period: int = 60,
        step_reward: float = -1.0,
        screen_format: str = ScreenFormat.RGB24,
    ) -> None:
        """
        Initialize synthetic engine.

        Args:
            width: Frame width in pixels
            height: Frame height in pixels
            button_count: Length of accepted action vectors
            episode_length: Ticks before an episode finishes
            target_size: Side of the moving square
            sweep_period: Ticks per sweep cycle
            step_reward: Reward for every submitted action
            screen_format: Packed buffer layout
        """
        if target_size >= min(width, height):
            raise ValueError(
                f"target_size {target_size} does not fit a {width}x{height} frame"
            )

        self.width = width
        self.height = height
        self._button_count = button_count
        self.episode_length = episode_length
        self.target_size = target_size
        self.sweep_period = sweep_period
        self.step_reward = step_reward
        self.screen_format = ScreenFormat(screen_format)

        self._episode: int = -1
        self._tic: int = 0
        self._total_reward: float = 0.0
        self._last_action: Optional[tuple] = None
        self._closed: bool = False

        logger.info(
            f"SyntheticEngine initialized: {width}x{height}, "
            f"episode_length={episode_length}, format={self.screen_format.value}"
        )

    @property
    def screen_width(self) -> int:
        return self.width

    @property
    def screen_height(self) -> int:
        return self.height

    @property
    def button_count(self) -> int:
        return self._button_count

    @property
    def episode(self) -> int:
        """Zero-based index of the current episode (-1 before the first)."""
        return self._episode

    @property
    def last_action(self) -> Optional[tuple]:
        """Most recently submitted action."""
        return self._last_action

    def new_episode(self) -> None:
        self._check_open()
        self._episode += 1
        self._tic = 0
        self._total_reward = 0.0
        self._last_action = None

    def is_episode_finished(self) -> bool:
        return self._episode < 0 or self._tic >= self.episode_length

    def target_position(self, tic: int) -> tuple:
        """Top-left (x, y) of the square at a tic."""
        span = self.width - self.target_size
        phase = 2 * math.pi * tic / self.sweep_period
        x = int(round((span / 2) * (1 + math.sin(phase))))
        y = self.height // 4
        return x, y

    def render(self, tic: int) -> np.ndarray:
        """RGB image of the scene at a tic."""
        image = np.full((self.height, self.width, 3), self.BACKGROUND, dtype=np.uint8)
        x, y = self.target_position(tic)
        image[y:y + self.target_size, x:x + self.target_size] = self.TARGET
        return image

    def acquire(self) -> Frame:
        self._check_open()
        if self.is_episode_finished():
            raise EngineUnavailableError(
                f"No state available: episode {self._episode} is finished"
            )

        buffer = encode_screen_buffer(self.render(self._tic), self.screen_format)
        pixels = decode_screen_buffer(buffer, self.width, self.height, self.screen_format)

        return Frame(
            tic=self._tic,
            pixels=pixels,
            game_variables=(float(self.episode_length - self._tic),),
        )

    def submit(self, action: Sequence[int]) -> float:
        self._check_open()
        action = tuple(action)
        if len(action) != self._button_count or any(v not in (0, 1) for v in action):
            raise EngineUnavailableError(
                f"Action rejected: expected {self._button_count} values of 0/1, got {action}"
            )
        if self.is_episode_finished():
            raise EngineUnavailableError("Action rejected: episode is finished")

        self._last_action = action
        self._tic += 1
        self._total_reward += self.step_reward
        return self.step_reward

    def total_reward(self) -> float:
        return self._total_reward

    def close(self) -> None:
        self._closed = True
        logger.info("SyntheticEngine closed")

    def _check_open(self) -> None:
        if self._closed:
            raise EngineUnavailableError("Engine is closed")
