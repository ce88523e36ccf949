"""Setup configuration for Photo Facets package."""

from setuptools import setup, find_namespace_packages

setup(
    name="photo-facets",
    version="1.0.0",
    description="Faceted photo discovery: filter state, compatibility rules, counts and presets",
    author="Alex",
    author_email="",
    packages=find_namespace_packages(include=["src", "src.*", "config", "api", "api.*", "scripts"]),
    package_data={"config": ["*.yaml"]},
    python_requires=">=3.11",
    install_requires=[
        "duckdb>=1.0.0",
        "pandas>=2.1.0",
        "python-dotenv>=1.0.0",
        "tqdm>=4.66.0",
        "tenacity>=8.2.0",
        "pyyaml>=6.0",
        "fastapi>=0.110.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=4.1.0",
            "httpx>=0.26.0",
            "black>=24.1.0",
            "ruff>=0.2.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "facets-load=scripts.load_catalog:main",
        ],
    },
)
