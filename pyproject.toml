[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "robolink"
version = "0.1.0"
description = "Packet protocol, UDP/TCP sockets, web front end and console client for commanding a networked robot"
requires-python = ">=3.10"
keywords = ["robot", "telemetry", "udp", "tcp", "packet", "telecommand", "flask"]
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
    "Framework :: Flask",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Topic :: Communications",
]
dependencies = [
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
robolink-web = "robolink.webserver:main"
robolink-console = "robolink.console:main"

[tool.hatch.build.targets.wheel]
packages = ["robolink"]

[tool.pytest.ini_options]
addopts = "-ra"
