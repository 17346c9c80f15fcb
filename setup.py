"""Setup configuration for quorumdao."""

from setuptools import find_packages, setup

setup(
    name="quorumdao",
    version="0.1.0",
    description="Quorum-governed execution engine for token-weighted organizations",
    author="quorumdao team",
    packages=find_packages(include=["quorumdao", "quorumdao.*"]),
    python_requires=">=3.8",
    install_requires=[
        "web3>=6.0.0",
        "eth-account>=0.9.0",
        "eth-abi>=4.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
        ],
        "dev": [
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quorumdao=quorumdao.cli:main",
        ],
    },
)
