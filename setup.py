#!/usr/bin/env python3

import os
import re

from setuptools import setup


def read(fname):
    with open(os.path.join(os.path.dirname(__file__), fname)) as f:
        return f.read()


def version():
    match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", read("issuefinder/__init__.py"), re.M)
    if not match:
        raise RuntimeError("failed to parse version")
    return match.group(1)


install_requires = [
    "aiosqlite >= 0.17.0",
    "toml >= 0.10.2",
    "wrapt >= 1.13.3",
]

tests_require = [
    "pytest >= 7.0.0",
    "pytest-asyncio >= 0.21.0",
]

classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
]

setup(
    name="issuefinder",
    version=version(),
    description="Catalog of repositories and issues with client-side filtering and pagination.",
    long_description=read("README.rst"),
    license="Mozilla Public License 2.0",
    classifiers=classifiers,
    packages=["issuefinder"],
    python_requires=">= 3.10",
    install_requires=install_requires,
    extras_require={"test": tests_require},
    keywords="catalog issues pagination filter",
)
