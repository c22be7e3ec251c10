import json

import pytest
from PIL import Image

from chip8.cli import EXIT_FATAL, EXIT_LOAD_FAILURE, EXIT_OK, main

from conftest import program_bytes


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in ("CHIP8_IPS", "CHIP8_SEED", "CHIP8_TIMER_THREAD", "CHIP8_QUIRKS"):
        monkeypatch.delenv(name, raising=False)


def _rom(tmp_path, words):
    path = tmp_path / "prog.ch8"
    path.write_bytes(program_bytes(words))
    return path


def test_runs_program(tmp_path) -> None:
    rom = _rom(tmp_path, [0x6005, 0x1202])
    assert main([str(rom), "--steps", "20", "--no-realtime"]) == EXIT_OK


def test_missing_rom_is_load_failure(tmp_path) -> None:
    assert main([str(tmp_path / "missing.ch8"), "--steps", "1"]) == EXIT_LOAD_FAILURE


def test_oversized_rom_is_load_failure(tmp_path) -> None:
    rom = tmp_path / "big.ch8"
    rom.write_bytes(bytes(4000))
    assert main([str(rom), "--steps", "1"]) == EXIT_LOAD_FAILURE


def test_bad_config_is_load_failure(tmp_path) -> None:
    rom = _rom(tmp_path, [0x1200])
    config = tmp_path / "machine.json"
    config.write_text(json.dumps({"stack_depth": 4}))
    assert main([str(rom), "--config", str(config)]) == EXIT_LOAD_FAILURE


def test_fatal_error_exit_status(tmp_path, capsys) -> None:
    rom = _rom(tmp_path, [0x00EE])
    assert main([str(rom), "--steps", "5", "--no-realtime"]) == EXIT_FATAL
    assert "return with empty call stack" in capsys.readouterr().err


def test_save_png_after_run(tmp_path) -> None:
    rom = _rom(tmp_path, [0xA050, 0xD015, 0x1204])
    png = tmp_path / "screen.png"

    status = main(
        [str(rom), "--steps", "3", "--no-realtime", "--seed", "1", "--save-png", str(png)]
    )

    assert status == EXIT_OK
    with Image.open(png) as image:
        assert image.size == (640, 320)
        assert image.getpixel((0, 0)) == (255, 255, 255)


def test_quirks_option_applies_preset(tmp_path) -> None:
    # 8016 shifts V1 into V0 under cosmac-vip; 3001 then skips the fault.
    rom = _rom(tmp_path, [0x6102, 0x8016, 0x3001, 0x00EE, 0x1208])
    args = [str(rom), "--steps", "6", "--no-realtime"]
    assert main(args + ["--quirks", "cosmac-vip"]) == EXIT_OK
    assert main(args) == EXIT_FATAL


def test_unknown_quirk_in_config_is_load_failure(tmp_path) -> None:
    rom = _rom(tmp_path, [0x1200])
    config = tmp_path / "machine.json"
    config.write_text(json.dumps({"quirks": {"wrap_sprites": True}}))
    assert main([str(rom), "--config", str(config), "--steps", "1"]) == EXIT_LOAD_FAILURE
