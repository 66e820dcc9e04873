#!/usr/bin/env python
from setuptools import find_packages, setup

about = {}
with open("src/textfx/version.py") as f:
    exec(f.read(), about)

setup(
    name="textfx",
    version=about["__version__"],
    description="Text-behind-subject photo compositing",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.9",
    install_requires=[
        "Pillow>=10.1.0",
        "numpy",
        "attrs>=23.1.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "imagehash",
        ],
    },
)
