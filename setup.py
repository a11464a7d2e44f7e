from setuptools import setup, find_packages

setup(
    name="compliancesim",
    version="0.1.0",
    description="Behavioral compliance simulation: agents deciding whether to follow legal rules",
    author="adamfilli",
    packages=find_packages(include=["compliancesim", "compliancesim.*"]),
    install_requires=[
        "matplotlib",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
