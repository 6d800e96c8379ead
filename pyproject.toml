[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pixview"
version = "0.1.0"
description = "Image tools: file listings, loadability checks, thumbnail index sheets, key bindings, captions and format conversion"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["image", "thumbnails", "index", "contact-sheet", "captions", "keybindings", "md5"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Viewers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
pixview = "pixview.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pixview"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
