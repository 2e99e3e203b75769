#!/usr/bin/env python3

from setuptools import setup


setup(
    name="sunnyboy-exporter",
    description="Prometheus exporter for SMA Sunny Boy inverters",
    author="Ryan Finnie",
    author_email="ryan@finnie.org",
    license="MPL-2.0",
    packages=["sunnyboy_exporter"],
    python_requires=">=3.9",
    install_requires=[
        "prometheus_client",
        "PyYAML",
        "requests",
        "structlog>=22.1",
        "urllib3",
    ],
    extras_require={
        "tests": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "sunnyboy-exporter = sunnyboy_exporter.sunnyboy:main",
        ]
    },
)
