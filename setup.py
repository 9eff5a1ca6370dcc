#!/usr/bin/env python
# -*- coding: utf-8 -*-

import os
import re

from setuptools import setup


def get_version(package):
    """
    Return package version as listed in `__version__` in `init.py`.
    """
    with open(os.path.join(package, "__init__.py"), encoding="utf8") as f:
        init_py = f.read()
    return re.search("__version__ = ['\"]([^'\"]+)['\"]", init_py).group(1)


def get_long_description():
    """
    Return the README.
    """
    with open("README.md", "r", encoding="utf8") as f:
        return f.read()


def get_packages(package):
    """
    Return root package and all sub-packages.
    """
    return [
        dirpath
        for dirpath, dirnames, filenames in os.walk(package)
        if os.path.exists(os.path.join(dirpath, "__init__.py"))
    ]


setup(
    name="sensor-stream",
    version=get_version("sensor_stream"),
    license="BSD",
    description="Synthetic sensor stream served over SSE and WebSocket side by side",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    package_data={"sensor_stream": ["py.typed"]},
    packages=get_packages("sensor_stream"),
    python_requires=">=3.9",
    install_requires=[
        "starlette>=0.37",
        "anyio>=4.0",
        "uvicorn[standard]>=0.23",
    ],
    extras_require={
        "benchmark": [
            "httpx>=0.25",
            "httpx-sse>=0.4",
            "websockets>=11.0",
        ],
        "test": [
            "pytest>=7.4",
            "httpx>=0.25",
            "httpx-sse>=0.4",
            "websockets>=11.0",
            "asgi-lifespan>=2.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "sensor-stream=sensor_stream.__main__:main",
            "sensor-stream-benchmark=sensor_stream.benchmark:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Web Environment",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Topic :: Internet :: WWW/HTTP",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
    ],
)
