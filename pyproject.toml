[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gostutil"
version = "0.1.0"
description = "Fixed-point decimals with a comparable binary form, big integers, IP pattern matching and small math helpers"
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = ["decimal", "bigdecimal", "biginteger", "ip-matching", "networking", "utilities"]
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
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gostutil"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
