#!/usr/bin/env python3
"""
Setup script for interolog
"""

from setuptools import setup, find_packages

setup(
    name="interolog",
    version="0.1.0",
    description="Interolog mapping of protein-protein interactions from MITAB evidence and PSI-BLAST homology",
    packages=find_packages(include=["interolog", "interolog.*"]),
    install_requires=[
        "pyyaml>=6.0",
        "numpy>=1.22.0",
        "pandas>=1.4.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'interolog=interolog.cli.main:main',
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
    python_requires=">=3.8",
)
