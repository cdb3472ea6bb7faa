[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iotbridge"
version = "3.0.0"
description = "Building blocks for bridging Modbus relays, energy meters and MQTT devices: framing, registers, message formats and supervision."
requires-python = ">=3.10"
keywords = ["iot", "modbus", "mqtt", "home-automation", "waveshare", "finder", "energy-meter", "jwt"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
    "Topic :: System :: Hardware",
]
dependencies = [
    "pyjwt",
    "pyserial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["iotbridge"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
