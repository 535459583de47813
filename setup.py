# setup.py
from setuptools import find_namespace_packages, setup

setup(
    name="repometa",
    version="1.0.0",
    description="Client-side type metadata cache and dump parser for a repository bridge",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["repometa*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'repometa=repometa.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
