[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "scrapeless-kit"
version = "0.1.0"
description = "Client toolkit for scraping, crawling, proxy, profile and cloud storage services"
requires-python = ">=3.10"
dependencies = [
    "flask",
]
keywords = ["scraping", "crawling", "storage", "queue", "vector", "proxy", "sdk"]
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
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["scrapeless_kit"]

[tool.hatch.build.targets.sdist]
include = ["scrapeless_kit", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
