from setuptools import setup, find_packages

setup(
    name="absint",
    version="0.1.0",
    description="absint — Sign-domain abstract interpreter for a toy imperative language",
    packages=find_packages(include=["absint", "absint.*"]),
    python_requires=">=3.10",
    install_requires=[
        "z3-solver>=4.12.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "absint=absint.cli:main",
        ],
    },
)
