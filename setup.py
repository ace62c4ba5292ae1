"""
Setup script for camel-math

Pure-Python package under src/. The dense back-end is an external CBLAS
library located at run time (see camel._kernel.lib_loader), so nothing is
compiled here.
"""

from pathlib import Path
from setuptools import setup, find_packages


# Read version from src/camel/__init__.py
def get_version():
    version_file = Path("src/camel/__init__.py")
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
    name="camel-math",
    version=get_version(),
    description="Heterogeneous matrix library with exact, symbolic and nested cells",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    zip_safe=False,
)
