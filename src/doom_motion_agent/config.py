"""
DoomMotionAgent Configuration
=============================

This module handles configuration loading for the motion agent.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Vision preset values
    4. Default values (lowest priority)

Environment Variable Mapping:
    DOOM_AGENT_ENGINE        -> engine.backend
    DOOM_AGENT_VIZDOOM_PATH  -> engine.vizdoom_path
    DOOM_AGENT_SCENARIO_PATH -> engine.scenario_path
    DOOM_AGENT_PRESET        -> vision.preset
    DOOM_AGENT_EPISODES      -> runner.episodes
    DOOM_AGENT_SHOW_WINDOW   -> observability.show_window
    DOOM_AGENT_LOG_LEVEL     -> logging.level

Example:
    from doom_motion_agent.config import settings

    print(settings.engine.backend)
    print(settings.vision.threshold)
"""

import os
import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


logger = logging.getLogger(__name__)


# =============================================================================
# Vision Presets
# =============================================================================

# Known detector/extractor/selector constant sets.
VISION_PRESETS: Dict[str, Dict[str, object]] = {
    "motion": {
        "mode": "temporal",
        "threshold": 120.0,
        "cluster_distance": 30.0,
        "margin": 25.0,
    },
    "motion_fine": {
        "mode": "temporal",
        "threshold": 150.0,
        "cluster_distance": 3.0,
        "margin": 10.0,
    },
    "brightness": {
        "mode": "static",
        "threshold": 150.0,
        "cluster_distance": 3.0,
        "margin": 10.0,
    },
}

DEFAULT_PRESET = "motion"


# =============================================================================
# Configuration Models
# =============================================================================

class AgentConfig(BaseModel):
    """Agent identification configuration."""

    name: str = Field(default="doom-motion-agent", description="Agent name")
    version: str = Field(default="v0.1.0", description="Agent version")


class SyntheticEngineConfig(BaseModel):
    """Synthetic engine configuration."""

    width: int = Field(default=320, ge=8, description="Frame width in pixels")
    height: int = Field(default=240, ge=8, description="Frame height in pixels")
    episode_length: int = Field(default=120, ge=1, description="Ticks per episode")
    target_size: int = Field(default=12, ge=1, description="Side of the moving square")
    sweep_period: int = Field(default=60, ge=2, description="Ticks per sweep cycle")
    step_reward: float = Field(default=-1.0, description="Reward for every action")


class EngineConfig(BaseModel):
    """Game engine configuration."""

    backend: str = Field(
        default="vizdoom",
        description="Engine backend: 'vizdoom' or 'synthetic'",
    )
    config_file: Optional[str] = Field(
        default=None,
        description="Optional ViZDoom .cfg loaded before the settings below",
    )
    vizdoom_path: Optional[str] = Field(default=None, description="ViZDoom executable")
    doom_game_path: Optional[str] = Field(default=None, description="IWAD file")
    scenario_path: Optional[str] = Field(default=None, description="Scenario WAD file")
    map: str = Field(default="map01", description="Map to start")
    screen_resolution: str = Field(default="RES_320X240", description="ScreenResolution name")
    screen_format: str = Field(
        default="RGB24",
        description="Screen buffer format: 'RGB24', 'BGR24' or 'CRCGCB'",
    )
    render_hud: bool = True
    render_minimal_hud: bool = False
    render_crosshair: bool = True
    render_weapon: bool = True
    render_decals: bool = False
    render_particles: bool = False
    render_effects_sprites: bool = True
    render_messages: bool = False
    render_corpses: bool = False
    depth_buffer_enabled: bool = False
    labels_buffer_enabled: bool = False
    automap_buffer_enabled: bool = False
    buttons: List[str] = Field(
        default_factory=lambda: ["MOVE_LEFT", "MOVE_RIGHT", "ATTACK"],
        description="Available buttons, in action-vector order",
    )
    game_variables: List[str] = Field(
        default_factory=lambda: ["AMMO2"],
        description="Game variables included in every state",
    )
    episode_timeout: int = Field(default=20000, ge=0, description="Episode timeout in tics")
    episode_start_time: int = Field(default=10, ge=0, description="Tics skipped at start")
    window_visible: bool = Field(default=True, description="Show the engine window")
    sound_enabled: bool = Field(default=False, description="Enable engine sound")
    mode: str = Field(default="PLAYER", description="ViZDoom Mode name")
    synthetic: SyntheticEngineConfig = Field(default_factory=SyntheticEngineConfig)

    @field_validator("screen_format")
    @classmethod
    def _check_screen_format(cls, value: str) -> str:
        value = value.upper()
        if value not in ("RGB24", "BGR24", "CRCGCB"):
            raise ValueError(f"Unsupported screen_format: {value}")
        return value


class VisionConfig(BaseModel):
    """
    Change detection and blob extraction configuration.

    A preset fills every value the config leaves unset.
    """

    preset: Optional[str] = Field(
        default=DEFAULT_PRESET,
        description="Preset: 'motion', 'motion_fine' or 'brightness'",
    )
    mode: str = Field(default="temporal", description="Detector mode: 'temporal' or 'static'")
    threshold: float = Field(default=120.0, ge=0, description="Weighted magnitude threshold d")
    cluster_distance: float = Field(default=30.0, gt=0, description="Linkage distance dst")
    truncate_centroids: bool = Field(
        default=False,
        description="Use truncating integer division for centroids",
    )
    hud_cutoff_ratio: float = Field(
        default=0.56,
        gt=0,
        le=1.0,
        description="Blobs below this fraction of the height are ignored",
    )

    @model_validator(mode="before")
    @classmethod
    def _apply_preset(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        preset = data.get("preset", DEFAULT_PRESET)
        if preset is None:
            return data
        if preset not in VISION_PRESETS:
            raise ValueError(
                f"Unknown vision preset: {preset}. "
                f"Known presets: {', '.join(sorted(VISION_PRESETS))}"
            )
        values = VISION_PRESETS[preset]
        for key in ("mode", "threshold", "cluster_distance"):
            data.setdefault(key, values[key])
        return data

    @field_validator("mode")
    @classmethod
    def _check_mode(cls, value: str) -> str:
        value = value.lower()
        if value not in ("temporal", "static"):
            raise ValueError(f"Unsupported detector mode: {value}")
        return value


class ActionVectorsConfig(BaseModel):
    """The three fixed action vectors, aligned with engine.buttons."""

    turn_left: List[int] = Field(default_factory=lambda: [1, 0, 0])
    turn_right: List[int] = Field(default_factory=lambda: [0, 1, 0])
    fire: List[int] = Field(default_factory=lambda: [0, 0, 1])


class PolicyConfig(BaseModel):
    """Action selection configuration."""

    mode: str = Field(default="centroid", description="Policy: 'centroid' or 'random'")
    margin: Optional[float] = Field(
        default=None,
        ge=0,
        description="Half-width of the fire band around screen center (preset if unset)",
    )
    actions: ActionVectorsConfig = Field(default_factory=ActionVectorsConfig)
    seed: Optional[int] = Field(default=None, description="Seed for the random policy")

    @field_validator("mode")
    @classmethod
    def _check_mode(cls, value: str) -> str:
        value = value.lower()
        if value not in ("centroid", "random"):
            raise ValueError(f"Unsupported policy mode: {value}")
        return value


class RunnerConfig(BaseModel):
    """Episode loop configuration."""

    episodes: int = Field(default=10, ge=1, description="Episodes to play")
    tick_sleep_ms: int = Field(
        default=28,
        ge=0,
        description="Pause after every action so a human can follow",
    )
    reset_reference_on_episode: bool = Field(
        default=True,
        description="Start each episode from a zero reference frame",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    show_window: bool = Field(default=False, description="Show the label window")
    window_name: str = Field(default="diff", description="OpenCV window name")
    wait_key_ms: int = Field(default=1, ge=1, description="cv2.waitKey delay per tick")
    log_every_n_ticks: int = Field(default=100, ge=1, description="Periodic log interval")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for DoomMotionAgent.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    agent: AgentConfig = Field(default_factory=AgentConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    vision: VisionConfig = Field(default_factory=VisionConfig)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def margin(self) -> float:
        """Selector margin: explicit policy value, else the vision preset's."""
        if self.policy.margin is not None:
            return self.policy.margin
        preset = self.vision.preset or DEFAULT_PRESET
        return float(VISION_PRESETS[preset]["margin"])

    @model_validator(mode="after")
    def _check_action_vectors(self) -> "Settings":
        button_count = len(self.engine.buttons)
        errors = []
        for name in ("turn_left", "turn_right", "fire"):
            vector = getattr(self.policy.actions, name)
            if len(vector) != button_count:
                errors.append(
                    f"policy.actions.{name} has {len(vector)} entries, "
                    f"engine declares {button_count} buttons"
                )
            if any(value not in (0, 1) for value in vector):
                errors.append(f"policy.actions.{name} must contain only 0 and 1")
        if errors:
            raise ValueError("Action vector validation failed:\n" + "\n".join(errors))
        return self


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Vision preset
        4. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/app/config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Engine settings
    if env_engine := os.environ.get("DOOM_AGENT_ENGINE"):
        config_data.setdefault("engine", {})["backend"] = env_engine
    if env_path := os.environ.get("DOOM_AGENT_VIZDOOM_PATH"):
        config_data.setdefault("engine", {})["vizdoom_path"] = env_path
    if env_scenario := os.environ.get("DOOM_AGENT_SCENARIO_PATH"):
        config_data.setdefault("engine", {})["scenario_path"] = env_scenario

    # Vision settings
    if env_preset := os.environ.get("DOOM_AGENT_PRESET"):
        config_data.setdefault("vision", {})["preset"] = env_preset

    # Runner settings
    if env_episodes := os.environ.get("DOOM_AGENT_EPISODES"):
        config_data.setdefault("runner", {})["episodes"] = int(env_episodes)

    # Observability settings
    if env_window := os.environ.get("DOOM_AGENT_SHOW_WINDOW"):
        config_data.setdefault("observability", {})["show_window"] = (
            env_window.lower() in ("1", "true", "yes", "on")
        )

    # Logging settings
    if env_log := os.environ.get("DOOM_AGENT_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
