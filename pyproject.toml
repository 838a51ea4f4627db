[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cybersauras"
version = "0.1.0"
description = "Game rules, scene files, PNG and chunk helpers for the CyberSauras Dash side-scrolling runner"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "pillow",
]
keywords = ["game", "arcade", "runner", "scene", "transform", "quaternion", "png", "chunk"]
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
    "Topic :: Games/Entertainment :: Side-Scrolling/Arcade Games",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["cybersauras"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
