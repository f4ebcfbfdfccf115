[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chainvet"
version = "0.1.0"
description = "Validation checks for OP Stack chain configurations against standard parameters, roles, contract versions and bytecode."
requires-python = ">=3.11"
keywords = ["ethereum", "op-stack", "validation", "superchain", "bytecode", "semver"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]
dependencies = [
    "requests",
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["chainvet"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
