[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "enmime"
version = "0.1.0"
description = "Tolerant MIME helpers: header decoding, media type repair, charset conversion, content cleaning and part trees"
requires-python = ">=3.10"
dependencies = []
keywords = ["mime", "email", "rfc2047", "content-type", "quoted-printable", "base64", "charset"]
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
    "Topic :: Communications :: Email",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["enmime"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
