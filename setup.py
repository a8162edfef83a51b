#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Standard library
from setuptools import setup, find_packages


# List of packages
pkgs = find_packages(exclude=["test", "test.*"])

# Create the build
setup(
    name="sifparts",
    packages=pkgs,
    install_requires=[
        "PyYAML",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    description="Split, join, and store large SIF images with git-lfs",
    entry_points={
        "console_scripts": [
            "sif-parts=sifparts.cli:main",
            "sif-install-lfs=sifparts.cli:main_install_lfs",
        ]
    },
    version="1.0.0")
