[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jupswap"
version = "0.1.0"
description = "Async client for the Jupiter swap aggregator HTTP API: quotes, swap transactions and swap instructions"
requires-python = ">=3.10"
dependencies = [
    "httpx>=0.24",
]
keywords = ["jupiter", "solana", "swap", "dex", "aggregator", "api-client", "async"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Office/Business :: Financial :: Investment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
    "pytest-asyncio>=0.21",
]

[tool.hatch.build.targets.wheel]
packages = ["jupswap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
