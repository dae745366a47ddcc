[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ltcodec"
version = "0.1.0"
description = "Encode and decode SMPTE linear timecode (LTC) audio signals"
requires-python = ">=3.10"
dependencies = []
keywords = ["ltc", "smpte", "timecode", "audio", "biphase", "sync"]
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
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
    "Topic :: Multimedia :: Video",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ltcodec"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
