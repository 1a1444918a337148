from setuptools import setup, find_packages

setup(
    name="gmp_pkg",
    version="0.1.0",
    description="A compartmental postprandial glucose metabolism simulator",
    author="Duy Nguyen",
    
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "pandas",
        "pydantic>=2",
        "structlog",
        "typer",
        "rich",
        "tomli; python_version < '3.11'",
        "tomli-w",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["gmp=gmp_pkg.cli.main:app"],
    },
    package_data={
        'gmp_pkg': ['catalog/builtin/parameters/*', 'catalog/builtin/meals/*'],
    },
    include_package_data=True,
)
