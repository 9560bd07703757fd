#!/usr/bin/env python3

from setuptools import setup

setup(
    name="id3core",
    version="0.1.0",
    author="Karoly Lorentey",
    author_email="karoly@lorentey.hu",
    packages=["id3core"],
    python_requires=">=3.6",
    license="BSD",
    description="ID3v2.2/ID3v2.3 tag codec in pure Python 3",
    long_description="""
Decodes and re-encodes ID3v2.2 and ID3v2.3 tags byte for byte: the tag
header and extended header, text and comment frames in ISO-8859-1 or
UCS-2, unknown frames as raw data, and trailing padding. Compressed and
encrypted frames are kept as opaque data.
""",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Topic :: Multimedia :: Sound/Audio"
        ],
    )
