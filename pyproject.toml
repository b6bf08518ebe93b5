[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "commitlog"
version = "0.1.0"
description = "An append-only, segmented commit log with a small HTTP front end, a service layer and client routing helpers."
requires-python = ">=3.10"
dependencies = []
keywords = ["commit log", "append-only", "log", "segment", "index", "replication"]
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
    "Topic :: System :: Logging",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
commitlog-http = "commitlog.httpserver:main"

[tool.hatch.build.targets.wheel]
packages = ["commitlog"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
