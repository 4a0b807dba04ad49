[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spanpool"
version = "0.1.0"
description = "A simulated three-tier concurrent memory pool: thread caches, a central cache and a page cache with span coalescing."
requires-python = ">=3.10"
dependencies = []
keywords = ["allocator", "memory-pool", "simulation", "span", "page-cache", "radix-tree"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
spanpool-benchmark = "spanpool.benchmark:main"
spanpool-selfcheck = "spanpool.selfcheck:main"

[tool.hatch.build.targets.wheel]
packages = ["spanpool"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
