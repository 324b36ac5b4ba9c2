"""
Setup configuration for Canvas Grid.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read long description from README if it exists
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="canvas-grid",
    version="0.1.0",
    description="Grid layout engine for placing canvas windows on Sway/i3 outputs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="canvas-grid contributors",
    author_email="",
    packages=find_packages(include=["canvas_grid", "canvas_grid.*"]),
    install_requires=[
        "pydantic>=2.0",
        "click>=8.0",
        "rich>=13.0",
        "i3ipc>=2.2",
    ],
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "canvas-grid=canvas_grid.cli.commands:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
        ],
    },
)
