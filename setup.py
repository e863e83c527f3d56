"""Setup configuration for resourceglob."""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="resourceglob",
    version="1.0.0",
    author="Stephen Cox",
    author_email="",
    description="Ant-style resource pattern resolution across directories, archives and providers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/andronics/resourceglob",
    packages=find_packages(include=["resourceglob", "resourceglob.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS :: MacOS X",
    ],
    python_requires=">=3.11",
    install_requires=[
        "pyyaml>=6.0",
        "jinja2>=3.1.2",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "black==23.7.0",
            "flake8>=6.1.0",
            "mypy>=1.5.0",
            "pre-commit>=3.3.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "resourceglob=resourceglob.cli:main",
        ],
    },
)
