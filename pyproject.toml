[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "minish"
version = "0.1.0"
description = "Core of a small POSIX-style shell: tokenizer, expander, builtins, heredocs and pipeline executor"
requires-python = ">=3.10"
dependencies = []
keywords = ["shell", "tokenizer", "pipeline", "heredoc", "builtins", "expansion"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: System Shells",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["minish*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
