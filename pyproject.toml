[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kvtoolkit"
version = "0.1.0"
description = "String-keyed hashtables, a RESP reply reader and dynamic byte strings for key-value tooling"
requires-python = ">=3.10"
dependencies = []
keywords = ["hashtable", "resp", "redis-protocol", "parser", "dynamic-string", "key-value"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kvtoolkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
