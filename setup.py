"""Package setup for web_fuzzer."""

from setuptools import setup, find_packages

setup(
    name="web-fuzzer",
    version="0.2.0",
    description="Multi-threaded web content discovery with recursive "
                "directory fuzzing, proxy rotation and response filters",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "urllib3>=2.0.0",
        "tqdm>=4.66.0",
        "colorlog>=6.8.0",
    ],
    extras_require={
        "socks": [
            "requests[socks]>=2.31.0",
        ],
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "web-fuzzer=web_fuzzer.cli:main",
        ],
    },
)
