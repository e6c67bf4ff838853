[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cabbridge"
version = "0.2.3"
description = "Core primitives for a file-based message bridge between command-line agent sessions: security checks, role routing, configuration and message schema validation."
requires-python = ">=3.10"
dependencies = []
keywords = ["agents", "messaging", "bridge", "validation", "routing", "configuration"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["cabbridge"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
