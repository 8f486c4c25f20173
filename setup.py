from setuptools import setup, find_namespace_packages

setup(
    name="minipaas",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["minipaas", "minipaas.*"]),
    package_dir={"": "src"},
    package_data={"minipaas.METADATA": ["data/*.json"]},
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "click>=8.0",
        "tenacity>=8.0",
        "python-dotenv>=1.0",
        "rdflib>=7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "minipaas=minipaas.CLI.main:main",
        ],
    },
)
