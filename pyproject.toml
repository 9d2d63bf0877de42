[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "r51bus"
version = "0.1.0"
description = "Message-bus nodes for a vehicle controller: Blink J1939 keypads and keyboxes, Bluetooth state, control helpers and a text console."
requires-python = ">=3.10"
dependencies = []
keywords = ["j1939", "can", "canbus", "vehicle", "console", "keypad"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Embedded Systems :: Controller Area Network (CAN) :: J1939",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["r51bus"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
