# SPDX-License-Identifier: Apache-2.0
from setuptools import setup, find_packages

setup(
    name="ohmage-core",
    version="2.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "sqlmodel<0.0.45",
        "sqlalchemy",
        "pydantic",
        "pydantic-settings",
        "click",
        "tzdata",
    ],
    extras_require={"test": ["pytest", "httpx"]},
    entry_points={"console_scripts": ["ohmage=ohmage.cli:main"]},
)
