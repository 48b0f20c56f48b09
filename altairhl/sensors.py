"""Sense HAT environmental sensors: HTS221 humidity/temperature and LPS25H pressure."""

from __future__ import annotations

import argparse
import os
import sys
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Union

HTS221_ADDRESS = 0x5F
LPS25H_ADDRESS = 0x5C
I2C_SLAVE = 0x0703
_AUTO_INCREMENT = 0x80
_OUTPUT_REGISTER = 0x28 + _AUTO_INCREMENT


class SensorError(OSError):
    """Raised when a sensor cannot be reached or returns a short reading."""


class I2CDevice(Protocol):
    def read(self, register: int, length: int) -> bytes: ...
    def write(self, register: int, data: bytes) -> int: ...
    def close(self) -> None: ...


def _cdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _s16(value: int) -> int:
    return value - 0x10000 if value > 0x7FFF else value


def _expect(data: bytes, length: int, what: str) -> bytes:
    if len(data) != length:
        raise SensorError(f"{what}: expected {length} bytes, got {len(data)}")
    return data


@dataclass(frozen=True)
class HTS221Calibration:
    """Factory calibration of the HTS221 humidity and temperature sensor."""

    h0_rh_x2: int
    h1_rh_x2: int
    t0_degc_x8: int
    t1_degc_x8: int
    h0_t0_out: int
    h1_t0_out: int
    t0_out: int
    t1_out: int

    @classmethod
    def from_registers(cls, data: bytes) -> "HTS221Calibration":
        """Build from the 16 calibration registers starting at 0x30."""
        c = _expect(bytes(data), 16, "HTS221 calibration")
        return cls(
            h0_rh_x2=c[0],
            h1_rh_x2=c[1],
            t0_degc_x8=c[2] | ((c[5] & 0x3) << 8),
            t1_degc_x8=c[3] | ((c[5] & 0xC) << 6),
            h0_t0_out=_s16(c[6] | (c[7] << 8)),
            h1_t0_out=_s16(c[10] | (c[11] << 8)),
            t0_out=_s16(c[12] | (c[13] << 8)),
            t1_out=_s16(c[14] | (c[15] << 8)),
        )

    @staticmethod
    def _outputs(sample: bytes) -> tuple:
        s = _expect(bytes(sample), 4, "HTS221 sample")
        return _s16(s[0] | (s[1] << 8)), _s16(s[2] | (s[3] << 8))

    def temperature(self, sample: bytes) -> float:
        """Degrees Celsius from the four output registers starting at 0x28."""
        _, t_out = self._outputs(sample)
        if self.t1_out == self.t0_out:
            raise SensorError("HTS221 temperature calibration is degenerate")
        t0 = _cdiv(self.t0_degc_x8, 8)
        t1 = _cdiv(self.t1_degc_x8, 8)
        tmp = (t_out - self.t0_out) * (t1 - t0) * 10
        return (_cdiv(tmp, self.t1_out - self.t0_out) + t0 * 10) / 10.0

    def humidity(self, sample: bytes) -> float:
        """Relative humidity in percent from the four output registers."""
        h_out, _ = self._outputs(sample)
        if self.h1_t0_out == self.h0_t0_out:
            raise SensorError("HTS221 humidity calibration is degenerate")
        h0 = _cdiv(self.h0_rh_x2, 2)
        h1 = _cdiv(self.h1_rh_x2, 2)
        tmp = (h_out - self.h0_t0_out) * (h1 - h0) * 10
        return (_cdiv(tmp, self.h1_t0_out - self.h0_t0_out) + h0 * 10) / 10.0


def lps25h_pressure(sample: bytes) -> int:
    """Pressure in hPa from the five LPS25H output registers."""
    s = _expect(bytes(sample), 5, "LPS25H sample")
    return (s[0] + (s[1] << 8) + (s[2] << 16)) // 4096


def lps25h_temperature(sample: bytes) -> float:
    """Degrees Celsius from the five LPS25H output registers."""
    s = _expect(bytes(sample), 5, "LPS25H sample")
    raw = _s16(s[3] + (s[4] << 8))
    return (425 + _cdiv(raw, 48)) / 10.0


class _LinuxI2CDevice:
    """One slave on a Linux i2c-dev bus."""

    def __init__(self, path: str, address: int) -> None:
        import fcntl

        self._fd = os.open(path, os.O_RDWR)
        try:
            fcntl.ioctl(self._fd, I2C_SLAVE, address)
        except OSError as exc:
            os.close(self._fd)
            raise SensorError(f"failed to acquire bus {path} for device {address:#04x}") from exc

    def read(self, register: int, length: int) -> bytes:
        if os.write(self._fd, bytes([register & 0xFF])) != 1:
            return b""
        return os.read(self._fd, length)

    def write(self, register: int, data: bytes) -> int:
        if not 1 <= len(data) <= 511:
            raise ValueError(f"I2C write must be 1 to 511 bytes, got {len(data)}")
        return os.write(self._fd, bytes([register & 0xFF]) + bytes(data)) - 1

    def close(self) -> None:
        if self._fd != -1:
            os.close(self._fd)
            self._fd = -1


Opener = Callable[[int], I2CDevice]


class SenseHat:
    """The Sense HAT's HTS221 and LPS25H sensors on one I2C bus.

    ``bus`` is a bus number, used as ``/dev/i2c-<bus>``, or a callable that
    returns a device for a given 7-bit address.
    """

    def __init__(self, bus: Union[int, Opener] = 1) -> None:
        if callable(bus):
            opener: Opener = bus
        else:
            path = f"/dev/i2c-{bus}"
            opener = lambda address: _LinuxI2CDevice(path, address)  # noqa: E731
        self._hts221: Optional[I2CDevice] = None
        self._lps25h: Optional[I2CDevice] = None
        try:
            self._hts221 = opener(HTS221_ADDRESS)
            self.calibration = self._init_hts221(self._hts221)
            self._lps25h = opener(LPS25H_ADDRESS)
            self._lps25h.write(0x20, bytes([0x90]))
        except BaseException:
            self.close()
            raise

    @staticmethod
    def _init_hts221(device: I2CDevice) -> HTS221Calibration:
        av_conf = bytearray(_expect(device.read(0x10, 1), 1, "HTS221 AV_CONF"))
        av_conf[0] = (av_conf[0] & 0xC0) | 0x1B
        device.write(0x10, bytes(av_conf))

        ctrl = bytearray(_expect(device.read(0x20 + _AUTO_INCREMENT, 3), 3, "HTS221 CTRL_REG"))
        ctrl[0] = (ctrl[0] & 0x78) | 0x81
        ctrl[1] &= 0x7C
        device.write(0x20 + _AUTO_INCREMENT, bytes(ctrl))

        return HTS221Calibration.from_registers(device.read(0x30 + _AUTO_INCREMENT, 16))

    def _device(self, device: Optional[I2CDevice], name: str) -> I2CDevice:
        if device is None:
            raise SensorError(f"{name} is closed")
        return device

    def _hts221_sample(self) -> bytes:
        return self._device(self._hts221, "HTS221").read(_OUTPUT_REGISTER, 4)

    def _lps25h_sample(self) -> bytes:
        return self._device(self._lps25h, "LPS25H").read(_OUTPUT_REGISTER, 5)

    def temperature(self) -> float:
        """Temperature from the HTS221 in degrees Celsius."""
        return self.calibration.temperature(self._hts221_sample())

    def humidity(self) -> float:
        """Relative humidity from the HTS221 in percent."""
        return self.calibration.humidity(self._hts221_sample())

    def pressure(self) -> int:
        """Air pressure from the LPS25H in hPa."""
        return lps25h_pressure(self._lps25h_sample())

    def temperature_from_lps25h(self) -> float:
        """Temperature from the LPS25H in degrees Celsius."""
        return lps25h_temperature(self._lps25h_sample())

    def close(self) -> None:
        """Release both sensors."""
        for device in (self._hts221, self._lps25h):
            if device is not None:
                device.close()
        self._hts221 = None
        self._lps25h = None

    def __enter__(self) -> "SenseHat":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print a series of sensor readings."""
    parser = argparse.ArgumentParser(description="Read the Sense HAT sensors.")
    parser.add_argument("--bus", type=int, default=1, help="I2C bus number")
    parser.add_argument("--count", type=int, default=10, help="number of readings")
    parser.add_argument("--interval", type=float, default=1.0, help="seconds between readings")
    args = parser.parse_args(argv)

    try:
        hat = SenseHat(args.bus)
    except OSError:
        print("Unable to initialize sense_hat")
        return -1

    with hat:
        for _ in range(args.count):
            print(f"HTS221 Temperature: {hat.temperature():.2f}")
            print(f"HTS221 Humidity: {hat.humidity():.2f}")
            print(f"LPS25H Pressure: {hat.pressure()}")
            print(f"LPS25H Temperature: {hat.temperature_from_lps25h():.2f}")
            print("-------------------------")
            sys.stdout.flush()
            time.sleep(args.interval)
    return 0


if __name__ == "__main__":
    sys.exit(main())