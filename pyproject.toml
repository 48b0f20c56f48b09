[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "altairhl"
version = "0.1.0"
description = "Altair 8800 emulator core: Intel 8080 CPU, 88-DCDD floppy controller, front panel and Sense HAT helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["altair", "8800", "intel", "8080", "emulator", "retrocomputing", "sense-hat", "floppy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
altairhl-sensors = "altairhl.sensors:main"

[tool.hatch.build.targets.wheel]
packages = ["altairhl"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
