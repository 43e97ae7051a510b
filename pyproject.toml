[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ns1rest"
version = "2.4.4"
description = "Client for the NS1 managed DNS REST API, with a local mock service for testing"
requires-python = ">=3.10"
dependencies = [
    "requests",
    "cryptography",
]
keywords = ["dns", "ns1", "rest", "api", "ipam", "dnssec", "mock"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Software Development :: Testing :: Mocking",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ns1rest"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
