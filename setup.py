"""
Label Vision - Package Setup Configuration
==========================================

Python package setup for the label-vision text detection library.
Supports pip installation and development mode.

Version: 1.0.0
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
this_directory = Path(__file__).parent
readme_file = this_directory / "README.md"
long_description = readme_file.read_text(encoding='utf-8') if readme_file.exists() else ""

# Read requirements
requirements = []
requirements_file = this_directory / "requirements.txt"
if requirements_file.exists():
    requirements = requirements_file.read_text().strip().split('\n')
    requirements = [req.strip() for req in requirements if req.strip() and not req.startswith('#')]

setup(
    # Basic package information
    name="label-vision",
    version="1.0.0",
    description="Heuristic text detection and capture-quality scoring for product label photos",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # Package structure
    packages=find_packages(where="src"),
    package_dir={"": "src"},

    # Include additional files
    include_package_data=True,
    package_data={
        "label_vision": [
            "resources/*.yaml",
        ],
    },

    # Dependencies
    install_requires=requirements,

    # Optional dependencies for different use cases
    extras_require={
        "dev": [
            "pytest>=6.0.0",
            "pytest-cov>=2.12.0",
            "black>=21.0.0",
            "flake8>=3.9.0",
        ],
    },

    # Python version requirement
    python_requires=">=3.8",

    # Classification
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Image Recognition",
    ],

    # Keywords for PyPI
    keywords=[
        "text detection", "computer vision", "image quality",
        "product labels", "annotation", "image processing",
    ],

    # Zip safety
    zip_safe=False,
)
