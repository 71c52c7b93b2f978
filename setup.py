#!/usr/bin/env python3
"""hostdeploy - Setup"""

from pathlib import Path

from setuptools import setup, find_packages

here = Path(__file__).parent

with open(here / "requirements.txt") as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith("#")]

setup(
    name="hostdeploy",
    version="1.0.0",
    description="Single-host deployment pipeline: Git branch to a verified app behind Nginx",
    author="hostdeploy Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "hostdeploy=hostdeploy.main:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
