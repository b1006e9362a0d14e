"""Tests for machine configuration loading."""

import pytest
from omegaconf.errors import OmegaConfBaseException
from chip8vm import load_config, MachineConfig, InstructionSet, create_state


def test_defaults():
    config = load_config()
    assert config == MachineConfig()
    assert config.instruction_set is InstructionSet.CORE
    assert config.modern_mode
    assert not config.extended


def test_overrides():
    config = load_config(overrides=["instruction_set=EXTENDED", "modern_mode=false"])
    assert config.instruction_set is InstructionSet.EXTENDED
    assert config.extended
    assert config.modern_mode is False


def test_yaml_file(tmp_path):
    path = tmp_path / "machine.yaml"
    path.write_text("instruction_set: EXTENDED\n")
    config = load_config(str(path))
    assert config == MachineConfig(instruction_set=InstructionSet.EXTENDED)


def test_overrides_win_over_file(tmp_path):
    path = tmp_path / "machine.yaml"
    path.write_text("instruction_set: EXTENDED\nmodern_mode: false\n")
    config = load_config(str(path), ["modern_mode=true"])
    assert config.extended
    assert config.modern_mode


@pytest.mark.parametrize("override", ["instruction_set=TURBO", "modern_mode=sometimes", "clock_speed=700"])
def test_invalid_overrides(override):
    with pytest.raises(OmegaConfBaseException):
        load_config(overrides=[override])


def test_config_is_hashable_static_state():
    config = load_config(overrides=["instruction_set=EXTENDED"])
    state = create_state(config)
    assert state.config is config
    assert hash(config) == hash(MachineConfig(instruction_set=InstructionSet.EXTENDED))
