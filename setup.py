# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from setuptools import setup, find_packages

setup(
    name="asicsmith",
    version="0.1.0",
    description="From dataflow circuits to ASIC-ready RTL and backend scripts",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["asicsmith", "asicsmith.*"]),
    install_requires=[
        "click>=8.1",
        "Jinja2>=3.1",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "PyYAML>=6.0",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Programming Language :: Python",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
    ],
    license="MIT",
    entry_points={
        'console_scripts': [
            'export-asic=asicsmith.cli.cli:main',
        ],
    },
    python_requires=">=3.10",
)
