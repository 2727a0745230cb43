#!/usr/bin/env python
import os

from setuptools import find_packages, setup


def get_version():
    version = {}
    with open(os.path.join("src", "ase_tools", "version.py")) as f:
        exec(f.read(), version)
    return version["__version__"]


setup(
    name="ase-tools",
    version=get_version(),
    description="Python package for reading Aseprite sprite files",
    license="MIT",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "attrs>=23.1.0",
        "numpy",
        "Pillow>=10.3.0",
    ],
    extras_require={
        "dev": ["pytest", "pytest-cov", "ipython"],
        "test": ["pytest", "pytest-cov"],
    },
    entry_points={
        "console_scripts": ["ase-tools=ase_tools.__main__:main"],
    },
)
