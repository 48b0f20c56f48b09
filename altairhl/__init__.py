"""Altair 8800 emulator core: 8080 CPU, floppy controller, front panel and Sense HAT sensors."""

__version__ = "0.1.0"

__all__ = ["alu", "cpu", "disk", "graphics", "memory", "panel", "registers", "sensors"]