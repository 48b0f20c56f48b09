# altairhl

An Altair 8800 emulator core in pure Python, with no third-party
dependencies. It contains:

- `altairhl.memory`: `Memory`, a byte-addressable memory (64 KB by default)
  with `read8`, `write8`, little-endian `read16` / `write16`, and `load` for
  copying a block of bytes in. Addresses wrap around the memory size.
- `altairhl.registers`: the 8080 register file `Registers` (with `af`, `bc`,
  `de` and `hl` pair properties and `check(condition)`), the `Flag`,
  `Register`, `Pair` and `Condition` enums, the opcode field helpers
  `destination`, `source` and `register_pair`, and `parity`.
- `altairhl.alu`: the arithmetic and logic operations (`add`, `subtract`,
  `compare`, `logical_and`, `logical_or`, `logical_xor`, `increment`,
  `decrement`, the four rotates and `decimal_adjust`) with their flag effects.
- `altairhl.cpu`: the `Intel8080` processor. `cycle()` fetches and executes
  one instruction and returns its cycle count; `examine`, `examine_next`,
  `deposit` and `deposit_next` act like the front-panel switches.
- `altairhl.disk`: `DiskController`, the 88-DCDD floppy controller for up to
  four drives, each backed by a binary file object holding 137-byte sectors,
  32 sectors per track. `Status` and `Control` name the register bits; status
  bits are active low.
- `altairhl.graphics`: an 8x8 font (`load_character`, characters 32 to 122),
  `reverse_byte`, `reverse_panel`, `rotate_counterclockwise`, and `Graphics`,
  which turns a bitmap into 64 pixel values of a chosen colour.
- `altairhl.panel`: the `AltairCommand`, `CpuOperatingMode` and `ButtonMode`
  enums, `encode_panel_word` / `decode_switches` for the front panel's shift
  registers, `SenseHatPanel` for showing the lights on an 8x8 LED matrix, and
  `FrontPanelSwitches` for latching switch readings.
- `altairhl.sensors`: `SenseHat`, reading the HTS221 and LPS25H sensors over
  Linux I2C, the calibration maths in `HTS221Calibration`, `lps25h_pressure`
  and `lps25h_temperature`, and the `altairhl-sensors` command.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Running a program

```python
import io

from altairhl.cpu import Intel8080
from altairhl.disk import DiskController
from altairhl.memory import Memory

memory = Memory()
# MVI A,'H' ; OUT 1 ; JMP 0000
memory.load(0x0000, bytes([0x3E, 0x48, 0xD3, 0x01, 0xC3, 0x00, 0x00]))

output = []
image = io.BytesIO(bytes(77 * 32 * 137))  # an empty disk image

cpu = Intel8080(
    memory,
    terminal_in=lambda: 0,
    terminal_out=output.append,
    sense=lambda: 0,
    disk=DiskController([image]),
    port_in=lambda port: 0,
    port_out=lambda port, value: None,
)
for _ in range(3):
    cpu.cycle()

print(bytes(output))  # b'H'
```

Every argument of `Intel8080` is optional; left out, memory is a fresh
64 KB `Memory`, the disk is a `DiskController` with no images, the terminal
reads 0, the sense switches read 0 and other input ports read 0xFF.

Port 0x01 and ports 0x10/0x11 (2SIO: status and data) go to the terminal
callables, ports 0x08 to 0x0A to the disk controller, input port 0xFF reads
the sense switches, input port 0x00 reads 0, and every other port is handed to
`port_in` / `port_out`. `cpu.status` holds the status lights as `CpuStatus`
bits.

## Front panel

`examine(address)` sets the program counter and address bus,
`examine_next()` steps the address bus, and `deposit(data)` /
`deposit_next(data)` store bytes the way the toggle switches do.

`SenseHatPanel.render(status, data, bus)` returns 64 pixel values: row 0 shows
the status byte, row 3 the data byte, rows 6 and 7 the high and low address
bytes, least significant bit first. `set_color` clamps non-zero values to
3..15.

`encode_panel_word(status, data, bus)` packs the lights into four bytes;
`decode_switches(raw)` turns the three bytes read back into a command and an
address. `FrontPanelSwitches.process(raw, handler)` stores the address
switches in `bus`, returns True when the command switches changed, and calls
`handler` when the new command is non-zero.

## Sense HAT sensors

On a Raspberry Pi with a Sense HAT:

```
altairhl-sensors --bus 1 --count 10 --interval 1
```

prints the HTS221 temperature and humidity and the LPS25H pressure and
temperature for each reading. If the sensors cannot be opened it prints
`Unable to initialize sense_hat` and returns -1.

From Python:

```python
from altairhl.sensors import SenseHat

with SenseHat(1) as hat:
    print(hat.temperature(), hat.humidity(), hat.pressure())
```

`SenseHat` also accepts a callable that returns a device object (with `read`,
`write` and `close`) for a given I2C address, which is how it can be used
without hardware.

## What it does not do

This is an emulator core, not a complete machine. There is no command that
runs the emulator, no terminal or front-panel hardware driver, and no BASIC or
other ROM images. The CPU has no interrupt handling, and the opcodes it does
not implement (HLT and the undocumented ones) do nothing and return 0 cycles
without advancing the program counter. The LED panel and switch code computes
pixel values and decodes switch bytes but does not talk to a framebuffer or
SPI device itself.