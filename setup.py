# setup.py
from setuptools import setup, find_packages

setup(
    name="dirzip",
    version="0.1.0",
    description="Recursively package a directory tree into a ZIP buffer or file",
    author="Swift Fox",
    packages=find_packages(
        exclude=(
            "tests",
            "tests.*",
            "docs",
            "dist",
            "build",
        )
    ),
    install_requires=[
        "fastapi>=0.100",
        "starlette>=0.27",
        "pydantic>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.24",
        ],
    },
    python_requires=">=3.10",
)
