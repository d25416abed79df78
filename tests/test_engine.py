"""
Engine Tests
============
"""

from types import SimpleNamespace

import numpy as np
import pytest

from doom_motion_agent.config import EngineConfig
from doom_motion_agent.engine import DoomEngine, EngineUnavailableError, SyntheticEngine


@pytest.fixture
def engine():
    return SyntheticEngine(width=320, height=240, episode_length=4)


class TestSyntheticEngine:
    """Tests for the deterministic engine."""

    def test_finished_before_first_episode(self, engine):
        """No state is available until an episode starts."""
        assert engine.is_episode_finished()
        with pytest.raises(EngineUnavailableError):
            engine.acquire()

    def test_frame_shape_and_position(self, engine):
        """The square is drawn where target_position says."""
        engine.new_episode()
        frame = engine.acquire()

        assert frame.shape == (240, 320)
        assert frame.pixels.dtype == np.uint8

        x, y = engine.target_position(0)
        size = engine.target_size
        assert (frame.pixels[y:y + size, x:x + size] == 255).all()
        assert frame.pixels[0, 0].tolist() == [16, 16, 16]

    def test_square_starts_centered(self, engine):
        """At tic 0 the square sits in the middle of its sweep."""
        x, y = engine.target_position(0)

        assert x == (320 - engine.target_size) // 2
        assert y == 60

    @pytest.mark.parametrize("screen_format", ["RGB24", "BGR24", "CRCGCB"])
    def test_all_formats_decode_the_same(self, screen_format):
        """The packed layout does not change the decoded frame."""
        engine = SyntheticEngine(screen_format=screen_format)
        engine.new_episode()

        assert np.array_equal(engine.acquire().pixels, engine.render(0))

    def test_episode_runs_to_length(self, engine):
        """An episode ends after episode_length actions."""
        engine.new_episode()
        for _ in range(4):
            assert not engine.is_episode_finished()
            engine.acquire()
            engine.submit((0, 0, 1))

        assert engine.is_episode_finished()
        assert engine.total_reward() == pytest.approx(-4.0)
        assert engine.last_action == (0, 0, 1)

    def test_new_episode_resets(self, engine):
        """A new episode starts at tic 0 with zero reward."""
        engine.new_episode()
        engine.submit((1, 0, 0))
        engine.new_episode()

        assert engine.episode == 1
        assert engine.total_reward() == 0.0
        assert engine.acquire().tic == 0

    def test_rejects_wrong_length(self, engine):
        """Action vectors must match the button count."""
        engine.new_episode()
        with pytest.raises(EngineUnavailableError):
            engine.submit((1, 0))

    def test_rejects_non_binary(self, engine):
        """Action values are 0 or 1."""
        engine.new_episode()
        with pytest.raises(EngineUnavailableError):
            engine.submit((2, 0, 0))

    def test_closed_engine(self, engine):
        """A closed engine rejects every call."""
        engine.close()
        with pytest.raises(EngineUnavailableError):
            engine.new_episode()

    def test_target_must_fit(self):
        """The square must fit inside the frame."""
        with pytest.raises(ValueError):
            SyntheticEngine(width=10, height=10, target_size=12)


# =============================================================================
# ViZDoom adapter
# =============================================================================

class FakeViZDoomError(Exception):
    pass


class FakeNotRunning(Exception):
    pass


class FakeUnexpectedExit(Exception):
    pass


class FakeFileMissing(Exception):
    pass


class FakeDoomGame:
    """Records configuration calls and serves scripted states."""

    width = 8
    height = 6

    def __init__(self):
        self.settings = {}
        self.buttons = []
        self.variables = []
        self.actions = []
        self.state = None
        self.fail_with = None
        self.finished = False
        self.closed = False

    def __getattr__(self, name):
        if name.startswith("set_") or name == "load_config":
            return lambda *args: self.settings.__setitem__(name, args)
        raise AttributeError(name)

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    def clear_available_buttons(self):
        self.buttons = []

    def add_available_button(self, button):
        self.buttons.append(button)

    def clear_available_game_variables(self):
        self.variables = []

    def add_available_game_variable(self, variable):
        self.variables.append(variable)

    def init(self):
        self._maybe_fail()

    def new_episode(self):
        self._maybe_fail()

    def is_episode_finished(self):
        self._maybe_fail()
        return self.finished

    def get_state(self):
        self._maybe_fail()
        return self.state

    def get_screen_width(self):
        return self.width

    def get_screen_height(self):
        return self.height

    def get_available_buttons_size(self):
        return len(self.buttons)

    def make_action(self, action):
        self._maybe_fail()
        self.actions.append(action)
        return -1.0

    def get_total_reward(self):
        self._maybe_fail()
        return -1.0 * len(self.actions)

    def close(self):
        self.closed = True


def _names(*names):
    return SimpleNamespace(**{name: name for name in names})


@pytest.fixture
def fake_vizdoom(monkeypatch):
    """Stand-in for the vizdoom module, installed through _import_vizdoom."""
    module = SimpleNamespace(
        DoomGame=FakeDoomGame,
        ScreenResolution=_names("RES_320X240", "RES_640X480"),
        ScreenFormat=_names("RGB24", "BGR24", "CRCGCB"),
        Button=_names("MOVE_LEFT", "MOVE_RIGHT", "ATTACK", "TURN_LEFT", "TURN_RIGHT"),
        GameVariable=_names("AMMO2", "HEALTH"),
        Mode=_names("PLAYER", "SPECTATOR"),
        ViZDoomErrorException=FakeViZDoomError,
        ViZDoomIsNotRunningException=FakeNotRunning,
        ViZDoomUnexpectedExitException=FakeUnexpectedExit,
        FileDoesNotExistException=FakeFileMissing,
    )
    monkeypatch.setattr(DoomEngine, "_import_vizdoom", staticmethod(lambda: module))
    return module


def _state(pixels, number=7, variables=(50.0,)):
    return SimpleNamespace(
        number=number,
        screen_buffer=pixels,
        game_variables=np.array(variables),
        depth_buffer=None,
        labels_buffer=None,
        automap_buffer=None,
    )


class TestDoomEngine:
    """Tests for the ViZDoom adapter against a fake module."""

    def test_applies_configuration(self, fake_vizdoom):
        """Every engine setting reaches the game before init()."""
        config = EngineConfig(
            scenario_path="/wads/basic.wad",
            screen_format="BGR24",
            game_variables=["AMMO2", "HEALTH"],
            window_visible=False,
        )
        engine = DoomEngine(config)
        game = engine._game

        assert game.settings["set_doom_scenario_path"] == ("/wads/basic.wad",)
        assert game.settings["set_screen_format"] == ("BGR24",)
        assert game.settings["set_screen_resolution"] == ("RES_320X240",)
        assert game.settings["set_window_visible"] == (False,)
        assert game.settings["set_mode"] == ("PLAYER",)
        assert "load_config" not in game.settings
        assert game.buttons == ["MOVE_LEFT", "MOVE_RIGHT", "ATTACK"]
        assert game.variables == ["AMMO2", "HEALTH"]
        assert engine.button_count == 3

    def test_unknown_button(self, fake_vizdoom):
        """Unknown enum names fail fast."""
        with pytest.raises(ValueError, match="button"):
            DoomEngine(EngineConfig(buttons=["MOVE_LEFT", "MOVE_RIGHT", "JUMPX"]))

    def test_init_failure(self, fake_vizdoom, monkeypatch):
        """An engine that cannot start is unavailable."""

        def failing_init(self):
            raise FakeFileMissing("basic.wad")

        monkeypatch.setattr(FakeDoomGame, "init", failing_init)

        with pytest.raises(EngineUnavailableError):
            DoomEngine(EngineConfig())

    def test_acquire_builds_frame(self, fake_vizdoom):
        """State buffer and variables become a Frame."""
        engine = DoomEngine(EngineConfig())
        pixels = np.zeros((6, 8, 3), dtype=np.uint8)
        pixels[2, 3] = (200, 100, 50)
        engine._game.state = _state(pixels)

        frame = engine.acquire()

        assert frame.tic == 7
        assert frame.shape == (6, 8)
        assert frame.pixels[2, 3].tolist() == [200, 100, 50]
        assert frame.game_variables == (50.0,)

    def test_acquire_decodes_bgr(self, fake_vizdoom):
        """BGR buffers are swapped to RGB."""
        engine = DoomEngine(EngineConfig(screen_format="BGR24"))
        engine._game.state = _state(np.full((6, 8, 3), (30, 20, 10), dtype=np.uint8))

        assert engine.acquire().pixels[0, 0].tolist() == [10, 20, 30]

    def test_missing_state(self, fake_vizdoom):
        """No state from the engine is fatal."""
        engine = DoomEngine(EngineConfig())
        engine._game.state = None

        with pytest.raises(EngineUnavailableError):
            engine.acquire()

    def test_engine_exit_is_unavailable(self, fake_vizdoom):
        """ViZDoom exceptions are reported as EngineUnavailableError."""
        engine = DoomEngine(EngineConfig())
        engine._game.fail_with = FakeUnexpectedExit("vizdoom exited")

        with pytest.raises(EngineUnavailableError):
            engine.submit((0, 0, 1))
        with pytest.raises(EngineUnavailableError):
            engine.acquire()
        with pytest.raises(EngineUnavailableError):
            engine.is_episode_finished()
        with pytest.raises(EngineUnavailableError):
            engine.new_episode()

    def test_submit(self, fake_vizdoom):
        """Actions are passed as lists and rewards returned as floats."""
        engine = DoomEngine(EngineConfig())

        reward = engine.submit((0, 1, 0))

        assert reward == -1.0
        assert engine._game.actions == [[0, 1, 0]]
        assert engine.total_reward() == -1.0

    def test_submit_wrong_length(self, fake_vizdoom):
        """Vectors must match the configured button count."""
        engine = DoomEngine(EngineConfig())

        with pytest.raises(EngineUnavailableError):
            engine.submit((1, 0))
        assert engine._game.actions == []

    def test_close(self, fake_vizdoom):
        """close() shuts the game down."""
        engine = DoomEngine(EngineConfig())
        engine.close()

        assert engine._game.closed
