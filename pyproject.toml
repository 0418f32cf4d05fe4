[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nezha"
version = "0.1.0"
description = "Building blocks of a server monitoring dashboard: IP helpers, localisation, stream relaying, registries and service availability statistics."
requires-python = ">=3.10"
keywords = [
    "monitoring",
    "dashboard",
    "uptime",
    "availability",
    "i18n",
    "streams",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Typing :: Typed",
]
dependencies = [
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["nezha"]

[tool.hatch.build.targets.sdist]
include = [
    "nezha",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
