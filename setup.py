"""
Setup script for the Series Provider Server.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="series-provider-server",
    version="1.0.0",
    description="In-memory time-series provider with revision history, browsing and search",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["series_store", "series_store.*", "api", "api.*"]),
    python_requires=">=3.11",
    install_requires=[
        # Web framework
        "fastapi>=0.110.0,<0.137",
        "uvicorn>=0.27.0",

        # Data validation
        "pydantic>=2.5.0",

        # Monitoring and observability
        "prometheus-client>=0.19.0",
        "psutil>=5.9.0",

        # Utilities
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "httpx>=0.26.0",
            "black>=23.12.0",
            "mypy>=1.7.0",
            "ruff>=0.1.8",
        ],
    },
    entry_points={
        "console_scripts": [
            "series-server=api.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
        "Topic :: Office/Business :: Financial",
    ],
    package_data={"series_store": ["data/*.json"]},
    include_package_data=True,
    zip_safe=False,
)
