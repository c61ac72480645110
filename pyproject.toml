[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "histqueue"
version = "0.1.0"
description = "Interval histograms of integers from files, shared between a server and a client over file-backed message queues"
requires-python = ">=3.10"
dependencies = []
keywords = ["histogram", "message queue", "ipc", "statistics"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
histserver = "histqueue.server:main"
histserver-th = "histqueue.server:main_threaded"
histclient = "histqueue.client:main"
histclient-th = "histqueue.client:main_threaded"

[tool.hatch.build.targets.wheel]
packages = ["histqueue"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
