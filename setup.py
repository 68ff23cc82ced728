"""Setup script for proteinribbon package."""

from setuptools import setup, find_packages

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read requirements
with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

# Structure adapters consume these objects without importing them
ADAPTER_REQUIREMENTS = ["pandas>=1.3.0", "biopython>=1.79"]

# Read version
exec(open("proteinribbon/__version__.py").read())

setup(
    name="proteinribbon",
    version=__version__,
    description="Cartoon ribbon, arrow and tube meshes for protein backbones",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["proteinribbon", "proteinribbon.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Topic :: Scientific/Engineering :: Visualization",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "adapters": ADAPTER_REQUIREMENTS,
        "dev": ADAPTER_REQUIREMENTS + [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "black>=23.0",
            "flake8>=6.0",
            "mypy>=1.0",
        ],
    },
)
