# -*- coding: utf-8 -*-

# system imports
from setuptools import setup, find_packages  # type: ignore


# proceed with actual install
install_requires = [
    "cffi>=1.15.0",
    "click>=8.0.0",
    "packaging",
    "rich>=12.0.0",
    "typing_extensions>=4.0.0",
]

dev_requires = [
    "black",
    "flake8",
    "mypy",
    "pre-commit",
    "pytest",
    "pytest-cov",
]

setup(
    name="sqlite-tiny",
    author="sqlite-tiny contributors",
    version="1.0.0",
    description="A thin, strict layer over the SQLite C API.",
    license="MIT",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages("src"),
    package_dir={"": "src"},
    install_requires=install_requires,
    extras_require={
        "dev": dev_requires,
        "test": ["pytest", "pytest-cov"],
    },
    zip_safe=False,
    entry_points={
        "console_scripts": ["sqlite-tiny=sqlite_tiny.cli:main"],
    },
    python_requires=">=3.8",
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Database",
    ],
)
