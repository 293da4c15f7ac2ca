#!/usr/bin/env python3
"""
setup script for studylens
"""

from setuptools import setup, find_packages

# read the readme file for the long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# read requirements from requirements.txt, skip comments and empty lines
with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

# configure the package setup
setup(
    name="studylens",
    version="1.0.0",
    author="studylens contributors",
    author_email="-",
    description="Turn slide decks and PDFs into bilingual study guides with notes, images and exam questions",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="-",
    # src/ and src/studylens/ both carry an __init__.py
    packages=find_packages(include=["src", "src.*"]),
    # package metadata for pypi
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    # install all the dependencies from requirements.txt
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.4.0", "httpx>=0.26.0"],
    },
    entry_points={
        "console_scripts": ["studylens=src.studylens.cli:app"],
    },
)
