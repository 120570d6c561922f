# setup.py
from setuptools import setup, find_packages

setup(
    name="site_checker",
    version="0.1.0",
    description="SiteChecker: проверка ссылок, разметки и схем сайта перед публикацией",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"site_checker": ["schemas/*.xsd"]},
    include_package_data=True,
    install_requires=[
        "aiohttp>=3.9",
        "multidict>=6.0",
        "lxml>=5.0",
        "html5lib>=1.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-checker=site_checker.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
