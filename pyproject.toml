[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xoverdsp"
version = "0.1.0"
description = "Audio DSP building blocks for active loudspeaker systems: biquad filters, limiter, compressor and delay lines"
requires-python = ">=3.10"
dependencies = []
keywords = ["audio", "dsp", "limiter", "compressor", "delay", "biquad", "time alignment"]
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
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["xoverdsp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
