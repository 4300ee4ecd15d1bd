[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "simplevm"
version = "0.1.0"
description = "A tiny register virtual machine that runs hex-encoded programs"
requires-python = ">=3.10"
dependencies = []
keywords = ["virtual machine", "emulator", "bytecode", "interpreter"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
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
simplevm = "simplevm.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["simplevm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
