"""
Setup script for stepwise-practice.

Stepwise is a terminal practice companion for parents and young learners.
It runs short adaptive sessions over small items (sentences, number
spellings, times tables, quiz questions) until each is mastered, then
rotates in fresh content and unlocks harder levels.

The 'stepwise' command is the only entry point.
"""

from setuptools import find_packages, setup

setup(
    name="stepwise-practice",
    version="1.0.0",
    description="Adaptive practice sessions for young learners, in the terminal",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Stepwise",
    packages=find_packages(include=["stepwise", "stepwise.*"]),
    package_data={"stepwise.content": ["banks/*.json"]},
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-bdd>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "stepwise=stepwise.delivery.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning mastery practice cli education children",
)
