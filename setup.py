#!/usr/bin/env python

import setuptools

with open("requirements.txt", "r") as req_file:
    requirements = [
        line.strip()
        for line in req_file.readlines()
        if line.strip() and not line.startswith("#")
    ]


setuptools.setup(
    name="omxplayer-output",
    version="1.0",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    license="GPL-2.0-or-later",
    description="OMXPlayer output module for a media renderer",
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={"test": ["pytest"]},
    scripts=[
        "bin/outputd",
    ],
)
