"""Machine configuration."""

import dataclasses
import enum
from typing import Optional, Sequence

from omegaconf import OmegaConf


class InstructionSet(enum.Enum):
    """Instruction families the interpreter executes.

    CORE runs the minimal subset (clear, jump, skip-if-equal, load/add
    immediate, load index, draw) and treats everything else as unsupported.
    EXTENDED runs the whole CHIP-8 instruction set, including the call stack,
    timers, keypad and the sprite collision flag.
    """
    CORE = "core"
    EXTENDED = "extended"


@dataclasses.dataclass(frozen=True)
class MachineConfig:
    """Static machine configuration carried by every state.

    Attributes:
        instruction_set: Which instruction profile to execute
        modern_mode: Use modern (CHIP-48/SCHIP) quirks instead of the original
            COSMAC VIP behaviour. Only affects instructions of the extended profile.
    """
    instruction_set: InstructionSet = InstructionSet.CORE
    modern_mode: bool = True

    @property
    def extended(self) -> bool:
        return self.instruction_set is InstructionSet.EXTENDED


def load_config(path: Optional[str] = None, overrides: Optional[Sequence[str]] = None) -> MachineConfig:
    """Build a MachineConfig from an optional YAML file and dotlist overrides.

    Args:
        path: YAML file with ``instruction_set`` and/or ``modern_mode`` keys
        overrides: ``key=value`` strings, e.g. ``["instruction_set=EXTENDED"]``

    Returns:
        Validated MachineConfig

    Raises:
        omegaconf.errors.ValidationError: On values of the wrong type
        omegaconf.errors.ConfigKeyError: On unknown keys
    """
    cfg = OmegaConf.structured(MachineConfig)
    # Frozen dataclasses produce read-only configs, which cannot be merged into.
    OmegaConf.set_readonly(cfg, False)

    if path is not None:
        cfg = OmegaConf.merge(cfg, OmegaConf.load(path))
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))

    return OmegaConf.to_object(cfg)
