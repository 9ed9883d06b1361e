[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meshgraph"
version = "0.1.0"
description = "Half-edge graph representation of polygonal meshes with topological mutations."
requires-python = ">=3.10"
dependencies = []
keywords = ["mesh", "half-edge", "dcel", "polygon", "topology", "graph"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["meshgraph"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
