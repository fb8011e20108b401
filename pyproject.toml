[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fvecrypt"
version = "0.1.0"
description = "Sector and key cryptography for BitLocker-style full volume encryption: AES-CBC with the Elephant diffuser, AES-XTS and AES-CCM key unwrapping."
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["bitlocker", "aes", "xts", "ccm", "diffuser", "disk encryption", "fvek", "vmk"]
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
    "Topic :: Security :: Cryptography",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["fvecrypt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
