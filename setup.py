# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="treesync",
    version="0.1.0",
    description="Builds in-memory instance snapshot trees from project file trees",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["treesync", "treesync.*"]),
    package_data={
        "treesync": ["resources/*.json"],
    },
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
