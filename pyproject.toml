[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hyperion"
version = "0.1.0"
description = "A small proof-of-work blockchain: core chain library, JSON-RPC node and solo miner"
requires-python = ">=3.11"
keywords = ["blockchain", "proof-of-work", "mining", "json-rpc", "merkle"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "aiohttp>=3.9",
    "tomli-w>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "pytest-asyncio>=0.23",
]

[project.scripts]
hyperion-node = "hyperion.node.node_app:main"
hyperion-miner = "hyperion.miner.miner_cli:main"

[tool.hatch.build.targets.wheel]
packages = ["hyperion"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
