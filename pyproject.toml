[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "astrasim"
version = "0.1.0"
description = "Logical topologies, offline greedy dimension scheduling and statistics for simulating distributed training systems"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "simulation",
    "distributed training",
    "collective communication",
    "topology",
    "scheduling",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["astrasim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
