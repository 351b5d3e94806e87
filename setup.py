from setuptools import setup, find_packages

setup(
    name="merge2048",
    version="0.1.0",
    packages=find_packages(include=["merge2048", "merge2048.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "gymnasium",
    ],
)
