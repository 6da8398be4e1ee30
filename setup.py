from setuptools import setup, find_packages
import os
import re


def get_version(module_file):
    """Return the version listed as `__version__` in the given module file."""
    init_py_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), module_file)
    if not os.path.exists(init_py_path):
        raise RuntimeError(f"Unable to find {module_file}.")

    with open(init_py_path, 'r', encoding='utf-8') as f:
        init_py = f.read()

    match = re.search("__version__ = ['\"]([^'\"]+)['\"]", init_py)
    if match:
        return match.group(1)
    raise RuntimeError(f"Unable to find __version__ string in {init_py_path}")


here = os.path.dirname(os.path.abspath(__file__))
version = get_version("version.py")

with open(os.path.join(here, "README.md"), "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open(os.path.join(here, "requirements.txt"), "r", encoding="utf-8") as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]

setup(
    name="mediaquery",
    version=version,
    description="Resolve videos, searches and playlists to media descriptors through an Invidious instance",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=[
        "cache_manager",
        "config",
        "exceptions",
        "logging_config",
        "main",
        "models",
        "server",
        "utils",
        "version",
    ],
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "mediaquery=server:main",
        ],
    },
)
