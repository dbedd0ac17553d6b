#!/usr/bin/env python

from setuptools import setup


VERSION = "0.1a1"

setup(
    name="xlex",
    version=VERSION,
    description="A blocking pull lexer that walks through XML documents.",
    license="AGPL-3.0-or-later",
    packages=["_xlex", "_xlex.plugins", "xlex"],
    python_requires=">=3.10",
    install_requires=["lxml"],
    extras_require={
        "web-loader": ["httpx"],
        "test": ["httpx", "pytest", "pytest-benchmark", "pytest-httpx"],
    },
)
