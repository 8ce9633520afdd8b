"""Setup script for zombie-detector"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
this_directory = Path(__file__).parent
long_description = ""
readme_path = this_directory / "README.md"
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

setup(
    name="zombie-detector",
    version="0.1.0",
    description="Dead and zombie code detection for PHP projects",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Quality Assurance",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.11",
    install_requires=[
        "tree-sitter>=0.23.0",
        "tree-sitter-php>=0.23.0",
        "typer>=0.9.0",
        "rich>=13.0.0",
        "watchfiles>=0.21.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "zombie-detector=zombie_detector.cli:app",
        ],
    },
    keywords="php dead-code zombie-code static-analysis call-graph reachability",
)
