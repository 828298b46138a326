"""Setup configuration for venvkit."""

from setuptools import setup, find_packages

setup(
    name="venvkit",
    version="0.1.0",
    description="Create and maintain Python virtual environments for editor integrations",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
        "packaging>=23.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "venvkit=venvkit.cli:main",
        ],
    },
)
