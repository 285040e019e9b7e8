"""Setup configuration for taintreview."""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_path = Path(__file__).parent / "README.md"
long_description = readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""

setup(
    name="taintreview",
    version="0.1.0",
    description="Heuristic taint-flow and secret scanning for security review of code changes",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Security",
        "Topic :: Software Development :: Quality Assurance",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "esprima>=4.0.1",  # For JavaScript/JSX parsing
        "tree-sitter>=0.23.0",  # For TypeScript/TSX parsing
        "tree-sitter-typescript>=0.23.0",
        "beautifulsoup4>=4.12.0",  # For HTML inline scripts
        "lxml>=4.9.0",  # HTML parser backend
        "python-dotenv>=1.0.0",  # For .env configuration
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "black>=23.0",
            "flake8>=6.0",
            "mypy>=1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "taintreview=taint_review.cli:main",
        ],
    },
)
