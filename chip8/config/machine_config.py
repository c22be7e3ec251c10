"""Machine configuration for the CHIP-8 interpreter."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from ..constants import (
    DEFAULT_INSTRUCTIONS_PER_SECOND,
    DEFAULT_STACK_DEPTH,
    MIN_STACK_DEPTH,
    TIMER_HZ,
)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().casefold()
    return normalized not in {"0", "false", "off", ""}


@dataclass(frozen=True)
class Quirks:
    """Compatibility knobs for behaviour that differs between interpreters.

    Defaults follow CHIP-48, which most surviving programs were written for.
    """

    shift_uses_vy: bool = False  # 8XY6/8XYE shift VY into VX
    load_store_increments_i: bool = False  # FX55/FX65 leave I = I + X + 1
    logic_resets_vf: bool = False  # 8XY1/8XY2/8XY3 clear VF
    jump_uses_vx: bool = False  # BXNN jumps to XNN + VX

    @classmethod
    def for_model(cls, model: str) -> "Quirks":
        """Get quirks for a named interpreter."""
        presets = {
            "chip-48": cls(),
            "cosmac-vip": cls(
                shift_uses_vy=True,
                load_store_increments_i=True,
                logic_resets_vf=True,
            ),
            "superchip": cls(jump_uses_vx=True),
        }
        try:
            return presets[model.strip().lower()]
        except KeyError:
            raise ValueError(
                f"Unknown quirks preset '{model}' (expected one of: {sorted(presets)})"
            ) from None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Quirks":
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(
                f"Unknown quirk(s) {unknown} (expected some of: {sorted(known)})"
            )
        return cls(**{name: bool(value) for name, value in data.items()})


@dataclass
class MachineConfig:
    """CHIP-8 machine configuration."""

    name: str = "CHIP-8"
    instructions_per_second: int = DEFAULT_INSTRUCTIONS_PER_SECOND
    timer_hz: float = TIMER_HZ
    stack_depth: int = DEFAULT_STACK_DEPTH
    timer_thread: bool = False  # tick timers from a background thread
    seed: Optional[int] = None  # RND seed; None draws from the OS
    quirks: Quirks = field(default_factory=Quirks)

    def __post_init__(self) -> None:
        if self.stack_depth < MIN_STACK_DEPTH:
            raise ValueError(
                f"stack_depth must be at least {MIN_STACK_DEPTH}, got {self.stack_depth}"
            )
        if self.instructions_per_second <= 0:
            raise ValueError("instructions_per_second must be positive")
        if self.timer_hz <= 0:
            raise ValueError("timer_hz must be positive")

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "MachineConfig":
        quirks = data.get("quirks") or {}
        if not isinstance(quirks, Mapping):
            raise ValueError(f"quirks must be an object, got {type(quirks).__name__}")
        return cls(
            name=str(data.get("name", "CHIP-8")),
            instructions_per_second=int(
                data.get("instructions_per_second", DEFAULT_INSTRUCTIONS_PER_SECOND)
            ),
            timer_hz=float(data.get("timer_hz", TIMER_HZ)),
            stack_depth=int(data.get("stack_depth", DEFAULT_STACK_DEPTH)),
            timer_thread=bool(data.get("timer_thread", False)),
            seed=None if data.get("seed") is None else int(data["seed"]),
            quirks=Quirks.from_dict(quirks),
        )

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "MachineConfig":
        """Load configuration from JSON file."""
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, base: Optional["MachineConfig"] = None) -> "MachineConfig":
        """Apply ``CHIP8_*`` environment overrides on top of ``base``."""

        config = base or cls()
        quirks = config.quirks
        preset = os.getenv("CHIP8_QUIRKS")
        if preset:
            quirks = Quirks.for_model(preset)
        quirks = Quirks(
            shift_uses_vy=_env_flag("CHIP8_SHIFT_USES_VY", quirks.shift_uses_vy),
            load_store_increments_i=_env_flag(
                "CHIP8_LOAD_STORE_INCREMENTS_I", quirks.load_store_increments_i
            ),
            logic_resets_vf=_env_flag("CHIP8_LOGIC_RESETS_VF", quirks.logic_resets_vf),
            jump_uses_vx=_env_flag("CHIP8_JUMP_USES_VX", quirks.jump_uses_vx),
        )

        ips = os.getenv("CHIP8_IPS")
        seed = os.getenv("CHIP8_SEED")
        return replace(
            config,
            instructions_per_second=int(ips) if ips else config.instructions_per_second,
            timer_thread=_env_flag("CHIP8_TIMER_THREAD", config.timer_thread),
            seed=int(seed, 0) if seed else config.seed,
            quirks=quirks,
        )
