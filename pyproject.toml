[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "relaychat"
version = "0.1.0"
description = "A small multi-user text chat server with channels, nicknames and private messages"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "server", "channels", "nicknames", "tcp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
relaychat = "relaychat.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["relaychat"]

[tool.pytest.ini_options]
addopts = "-ra"
