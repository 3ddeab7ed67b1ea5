# -*- coding: utf-8 -*-
"""Install rsbundle

:copyright: Copyright (c) 2026 RadiaSoft LLC.  All Rights Reserved.
:license: http://www.apache.org/licenses/LICENSE-2.0.html
"""
import setuptools


def _requires():
    return [
        "argh>=0.26",
        "py>=1.4",
        "pykern",
        "requests>=2.18",
    ]


setuptools.setup(
    name="rsbundle",
    version="20261018.0",
    description="Build, install, and activate versioned software bundles",
    author="RadiaSoft LLC",
    author_email="pip@pykern.org",
    install_requires=_requires(),
    extras_require={
        "test": [
            "pytest>=2.7",
        ],
    },
    entry_points={
        "console_scripts": [
            "rsbundle=rsbundle.rsbundle_console:main",
        ],
    },
    license="http://www.apache.org/licenses/LICENSE-2.0.html",
    packages=setuptools.find_packages(include=["rsbundle", "rsbundle.*"]),
    python_requires=">=3.12",
    url="http://pykern.org",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Apache Software License",
        "Natural Language :: English",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python",
        "Topic :: System :: Installation/Setup",
        "Topic :: System :: Software Distribution",
    ],
)
