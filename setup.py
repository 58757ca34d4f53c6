"""
Setup script for rowmat

rowmat is a pure Python package, so this script only:
1. Reads the version from src/rowmat/__init__.py
2. Reads the long description from README.md when present
3. Declares the src/ layout, runtime dependencies and the test extra
"""

from pathlib import Path
from setuptools import setup, find_packages


# Read version from src/rowmat/__init__.py
def get_version():
    version_file = Path("src/rowmat/__init__.py")
    if version_file.exists():
        for line in version_file.read_text().splitlines():
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"


# Read long description from README
def get_long_description():
    readme = Path("README.md")
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    name="rowmat",
    version=get_version(),
    description="Dense row-major matrices with zero-copy borrowed views",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    zip_safe=True,
)
