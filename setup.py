#!/usr/bin/env python

from setuptools import setup, find_namespace_packages

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name="alnpy",
    version='0.1.0',
    author="Ian Sillitoe",
    author_email="i.sillitoe@ucl.ac.uk",
    description="AlnPy - reading multiple sequence alignments in CLUSTAL format.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=['alnpy', 'alnpy.*']),
    include_package_data=True,
    test_suite="tests",
    python_requires='>=3.6',
    install_requires=[
        'jsonpickle',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    classifiers=(
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ),
)
