[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "subrender"
version = "0.1.0"
description = "Render Advanced SubStation Alpha dialogue events into frames, RGBA/BGRA bitmaps and glyph-quad vertex data"
requires-python = ">=3.10"
keywords = ["ass", "ssa", "subtitles", "rendering", "text-layout", "glyph-atlas"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Display",
    "Topic :: Text Processing :: Fonts",
]
dependencies = [
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["subrender"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
