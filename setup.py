# -*- coding: utf-8 -*-
from setuptools import setup, find_packages

long_description = "Streaming technical indicators with commit / revision updates and composable node graphs"

setup(
    name = "ta-stream",
    packages = find_packages(include=["ta_stream", "ta_stream.*"]),
    version = "0.1.0a",
    description=long_description,
    long_description=long_description,
    keywords = ['technical analysis', 'streaming', 'python3', 'pandas'],
    license="The MIT License (MIT)",
    python_requires=">=3.8",
    classifiers = [
        'Programming Language :: Python :: 3.8',
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Intended Audience :: Developers',
        'Intended Audience :: Financial and Insurance Industry',
        'Topic :: Office/Business :: Financial :: Investment',
    ],
    install_requires=['pandas'],

    # List additional groups of dependencies here (e.g. development dependencies).
    # You can install these using the following syntax, for example:
    # $ pip install -e .[dev,test]
    extras_require = {
        'dev': ['pytest', 'numpy', 'jupyterlab'],
        'test': ['pytest', 'numpy'],
    },
)
