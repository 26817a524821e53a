"""
Setup script for Import Fixer.

Removes unused imports, inserts missing ones, drops duplicate import lines
and sorts imports in Python source files using flake8 and isort.
"""

from setuptools import setup, find_packages
import os
import re

# Get version from __init__.py
def get_version():
    init_path = os.path.join(os.path.dirname(__file__), 'import_fixer', '__init__.py')
    if os.path.exists(init_path):
        with open(init_path, 'r', encoding='utf-8') as f:
            content = f.read()
            version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", content, re.M)
            if version_match:
                return version_match.group(1)
    return "0.1.0"

# Read the README file for long description
def read_readme():
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return "Import Fixer - remove unused, add missing and sort Python imports."

# Read requirements from requirements.txt, filtering out dev dependencies
def read_requirements():
    requirements_path = os.path.join(os.path.dirname(__file__), 'requirements.txt')
    requirements = []
    dev_packages = {'pytest', 'pytest-cov', 'mypy', 'types-'}
    
    if os.path.exists(requirements_path):
        with open(requirements_path, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#'):
                    # Skip dev dependencies for main install
                    if not any(dev_pkg in line.lower() for dev_pkg in dev_packages):
                        requirements.append(line)
    return requirements

setup(
    name="import-fixer",
    version=get_version(),
    author="Import Fixer Team",
    description="Remove unused, insert missing, deduplicate and sort Python imports",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Quality Assurance",
        "Environment :: Console",
    ],
    python_requires=">=3.9",
    install_requires=read_requirements(),
    extras_require={
        "dev": [
            "pytest>=8.2.2",
            "pytest-cov>=5.0.0",
            "black>=23.0.0",
            "mypy>=1.10.0",
            "types-PyYAML",
            "types-tabulate",
        ],
    },
    entry_points={
        "console_scripts": [
            "import-fixer=import_fixer.cli:main",
        ],
    },
    zip_safe=False,
    keywords="imports flake8 isort unused-imports refactoring linting",
)
