from setuptools import find_packages, setup

setup(
    name="starknet-contract-player",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9,<3.13",
    entry_points={
        "console_scripts": [
            "contract-player=contract_player.main:main",
        ],
    },
    install_requires=[
        "starknet-py>=0.23,<0.25",
        "aiohttp",
        "click>=8.0",
        "structlog>=21.1",
        "pyyaml",
        "jinja2",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio>=0.21",
        ],
    },
)
