# setup.py
from setuptools import setup, find_packages

setup(
    name="link_spider",
    version="0.1.0",
    description="Concurrent, deduplicated, depth-bounded link crawler with on-disk page cache",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"link_spider": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["link-spider=link_spider.cli:cli"],
    },
    python_requires=">=3.11",
)
