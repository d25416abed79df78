"""
ViZDoom Engine
==============

Game engine backend driving ViZDoom through its Python bindings.

This engine:
    - Applies the engine section of the settings before init()
    - Converts game states into canonical RGB Frames
    - Maps ViZDoom exceptions to EngineUnavailableError

Design Rules:
    - Fail fast on misconfiguration (unknown button, resolution, ...)
    - No retries; a dead engine aborts the episode
"""

import logging
from typing import Optional, Sequence

import numpy as np

from doom_motion_agent.acquisition.decoder import decode_screen_buffer
from doom_motion_agent.acquisition.frame import Frame
from doom_motion_agent.config import EngineConfig
from doom_motion_agent.engine.base import EngineUnavailableError


logger = logging.getLogger(__name__)


class DoomEngine:
    """
    ViZDoom-backed game engine.

    Attributes:
        config: Engine configuration section
    """

    def __init__(self, config: EngineConfig) -> None:
        """
        Create and initialize the ViZDoom game.

        Args:
            config: Engine configuration

        Raises:
            ImportError: If vizdoom is not installed
            ValueError: If a configured enum name is unknown
            EngineUnavailableError: If the engine fails to start
        """
        self.config = config
        self._vzd = self._import_vizdoom()
        self._errors = self._engine_exceptions()
        self._game = self._vzd.DoomGame()

        self._configure()

        try:
            self._game.init()
        except self._errors as e:
            raise EngineUnavailableError(f"Failed to start ViZDoom: {e}")

        logger.info(
            f"DoomEngine initialized: {self.screen_width}x{self.screen_height}, "
            f"buttons={config.buttons}, format={config.screen_format}"
        )

    @staticmethod
    def _import_vizdoom():
        try:
            import vizdoom
        except ImportError:
            raise ImportError(
                "vizdoom is required for DoomEngine. "
                "Install with: pip install vizdoom"
            )
        return vizdoom

    def _engine_exceptions(self) -> tuple:
        vzd = self._vzd
        return (
            vzd.ViZDoomErrorException,
            vzd.ViZDoomIsNotRunningException,
            vzd.ViZDoomUnexpectedExitException,
            vzd.FileDoesNotExistException,
        )

    def _enum(self, enum_type, name: str, what: str):
        try:
            return getattr(enum_type, name.upper())
        except AttributeError:
            raise ValueError(f"Unknown ViZDoom {what}: {name}")

    def _configure(self) -> None:
        """Apply all settings. Must run before init()."""
        cfg = self.config
        game = self._game
        vzd = self._vzd

        if cfg.config_file:
            game.load_config(cfg.config_file)
        if cfg.vizdoom_path:
            game.set_vizdoom_path(cfg.vizdoom_path)
        if cfg.doom_game_path:
            game.set_doom_game_path(cfg.doom_game_path)
        if cfg.scenario_path:
            game.set_doom_scenario_path(cfg.scenario_path)
        game.set_doom_map(cfg.map)

        game.set_screen_resolution(
            self._enum(vzd.ScreenResolution, cfg.screen_resolution, "screen resolution")
        )
        game.set_screen_format(
            self._enum(vzd.ScreenFormat, cfg.screen_format, "screen format")
        )

        # Rendering options
        game.set_render_hud(cfg.render_hud)
        game.set_render_minimal_hud(cfg.render_minimal_hud)
        game.set_render_crosshair(cfg.render_crosshair)
        game.set_render_weapon(cfg.render_weapon)
        game.set_render_decals(cfg.render_decals)
        game.set_render_particles(cfg.render_particles)
        game.set_render_effects_sprites(cfg.render_effects_sprites)
        game.set_render_messages(cfg.render_messages)
        game.set_render_corpses(cfg.render_corpses)

        # Ancillary buffers
        game.set_depth_buffer_enabled(cfg.depth_buffer_enabled)
        game.set_labels_buffer_enabled(cfg.labels_buffer_enabled)
        game.set_automap_buffer_enabled(cfg.automap_buffer_enabled)

        game.clear_available_buttons()
        for name in cfg.buttons:
            game.add_available_button(self._enum(vzd.Button, name, "button"))

        game.clear_available_game_variables()
        for name in cfg.game_variables:
            game.add_available_game_variable(
                self._enum(vzd.GameVariable, name, "game variable")
            )

        game.set_episode_timeout(cfg.episode_timeout)
        game.set_episode_start_time(cfg.episode_start_time)
        game.set_window_visible(cfg.window_visible)
        game.set_sound_enabled(cfg.sound_enabled)
        game.set_mode(self._enum(vzd.Mode, cfg.mode, "mode"))

    @property
    def screen_width(self) -> int:
        return int(self._game.get_screen_width())

    @property
    def screen_height(self) -> int:
        return int(self._game.get_screen_height())

    @property
    def button_count(self) -> int:
        return int(self._game.get_available_buttons_size())

    def new_episode(self) -> None:
        try:
            self._game.new_episode()
        except self._errors as e:
            raise EngineUnavailableError(f"Failed to start episode: {e}")

    def is_episode_finished(self) -> bool:
        try:
            return bool(self._game.is_episode_finished())
        except self._errors as e:
            raise EngineUnavailableError(f"Engine stopped responding: {e}")

    def acquire(self) -> Frame:
        try:
            state = self._game.get_state()
        except self._errors as e:
            raise EngineUnavailableError(f"Failed to get state: {e}")

        if state is None or state.screen_buffer is None:
            raise EngineUnavailableError("Engine delivered no screen buffer")

        pixels = decode_screen_buffer(
            state.screen_buffer,
            self.screen_width,
            self.screen_height,
            self.config.screen_format,
        )

        return Frame(
            tic=int(state.number),
            pixels=pixels,
            game_variables=self._variables(state.game_variables),
            depth=state.depth_buffer,
            labels=state.labels_buffer,
            automap=state.automap_buffer,
        )

    @staticmethod
    def _variables(values: Optional[np.ndarray]) -> tuple:
        if values is None:
            return ()
        return tuple(float(v) for v in values)

    def submit(self, action: Sequence[int]) -> float:
        vector = [int(v) for v in action]
        if len(vector) != self.button_count:
            raise EngineUnavailableError(
                f"Action rejected: expected {self.button_count} values, got {len(vector)}"
            )
        try:
            return float(self._game.make_action(vector))
        except self._errors as e:
            raise EngineUnavailableError(f"Action rejected by engine: {e}")

    def total_reward(self) -> float:
        try:
            return float(self._game.get_total_reward())
        except self._errors as e:
            raise EngineUnavailableError(f"Failed to read total reward: {e}")

    def close(self) -> None:
        self._game.close()
        logger.info("DoomEngine closed")
