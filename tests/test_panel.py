import pytest

from altairhl.panel import (
    AltairCommand,
    FrontPanelSwitches,
    SenseHatPanel,
    decode_switches,
    encode_panel_word,
)


def test_encode_all_lights_on():
    assert encode_panel_word(0xFF, 0xFF, 0xFFFF) == b"\xff\xff\xff\xff"


def test_encode_alternating_pattern():
    assert encode_panel_word(0xAA, 0xAA, 0xAAAA) == b"\xaa\xaa\xaa\xaa"


def test_encode_places_fields():
    word = int.from_bytes(encode_panel_word(0x12, 0x34, 0x5678), "little")
    assert word >> 24 == 0x12
    assert (word >> 16) & 0xFF == 0x34
    assert word & 0xFFFF == 0x5678


def test_decode_command_byte_passes_through():
    for command in (0x01, 0x20, 0x80):
        assert decode_switches(bytes([0, 0, command])).command == command


def test_decode_all_switches_open():
    assert decode_switches(b"\x00\x00\x00").address == 0xFFFF


def test_decode_all_switches_closed():
    assert decode_switches(b"\xff\xff\x00").address == 0


def test_decode_is_bijective_over_addresses():
    seen = {decode_switches(value.to_bytes(2, "little") + b"\x00").address for value in range(0x10000)}
    assert len(seen) == 0x10000


def test_decode_rejects_wrong_length():
    with pytest.raises(ValueError):
        decode_switches(b"\x00\x00")


def test_decoded_command_maps_to_enum():
    command = decode_switches(bytes([0, 0, AltairCommand.EXAMINE])).command
    assert AltairCommand(command) is AltairCommand.EXAMINE


def test_render_blank():
    panel = SenseHatPanel()
    pixels = panel.render(0, 0, 0)
    assert len(pixels) == 64
    assert all(p == 0 for p in pixels)


def test_render_status_row():
    panel = SenseHatPanel()
    pixels = panel.render(0xFF, 0, 0)
    assert pixels[:8] == [panel.color] * 8
    assert all(p == 0 for p in pixels[8:])


def test_render_data_low_bit():
    panel = SenseHatPanel()
    pixels = panel.render(0, 0x01, 0)
    lit = [i for i, p in enumerate(pixels) if p]
    assert lit == [24]
    assert pixels[24] == panel.color


def test_render_bus_bytes():
    panel = SenseHatPanel()
    pixels = panel.render(0, 0, 0x8001)
    lit = [i for i, p in enumerate(pixels) if p]
    assert lit == [55, 56]


def test_set_color_clamps_low():
    low, three = SenseHatPanel(), SenseHatPanel()
    low.set_color(1)
    three.set_color(3)
    assert low.color == three.color


def test_set_color_clamps_high():
    high, fifteen = SenseHatPanel(), SenseHatPanel()
    high.set_color(100)
    fifteen.set_color(15)
    assert high.color == fifteen.color


def test_set_color_increases_with_brightness():
    panel = SenseHatPanel()
    colors = []
    for value in (0, 3, 8, 15):
        panel.set_color(value)
        colors.append(panel.color)
    assert colors == sorted(colors)
    assert len(set(colors)) == 4


def test_render_uses_new_color():
    panel = SenseHatPanel()
    panel.set_color(10)
    assert panel.render(1, 0, 0)[0] == panel.color


def test_switches_latch_new_command_and_call_handler():
    switches = FrontPanelSwitches()
    calls = []
    changed = switches.process(bytes([0, 0, AltairCommand.RUN_CMD]), lambda: calls.append(1))
    assert changed is True
    assert switches.command == AltairCommand.RUN_CMD
    assert calls == [1]


def test_switches_ignore_repeated_command():
    switches = FrontPanelSwitches()
    calls = []
    raw = bytes([0, 0, AltairCommand.STOP_CMD])
    switches.process(raw, lambda: calls.append(1))
    changed = switches.process(raw, lambda: calls.append(1))
    assert changed is False
    assert calls == [1]


def test_switches_release_does_not_call_handler():
    switches = FrontPanelSwitches()
    calls = []
    switches.process(bytes([0, 0, AltairCommand.DEPOSIT]), lambda: calls.append(1))
    changed = switches.process(b"\x00\x00\x00", lambda: calls.append(1))
    assert changed is True
    assert switches.command == AltairCommand.NOP
    assert calls == [1]


def test_switches_record_bus_address():
    switches = FrontPanelSwitches()
    raw = b"\x12\x34\x00"
    switches.process(raw)
    assert switches.bus == decode_switches(raw).address