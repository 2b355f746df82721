[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fletcherwave"
version = "0.1.0"
description = "Finite-difference propagation of pseudo-acoustic waves in ISO, VTI and TTI media with RSF output"
requires-python = ">=3.10"
keywords = ["seismic", "wave propagation", "finite differences", "anisotropy", "RSF"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
fletcherwave = "fletcherwave.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["fletcherwave"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
