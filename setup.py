#!/usr/bin/env python

import mtoken
from pathlib import Path

from setuptools import setup, find_packages

long_description = Path('README.md').read_text(encoding='utf-8', errors='ignore')

classifiers = [  # copied from https://pypi.org/classifiers/
    'Development Status :: 4 - Beta',
    'Intended Audience :: Developers',
    'Topic :: Text Processing',
    'Topic :: Text Processing :: General',
    'Topic :: Text Processing :: Filters',
    'Topic :: Text Processing :: Linguistic',
    'License :: OSI Approved :: Apache Software License',
    'Programming Language :: Python :: 3 :: Only',
]

setup(
    name='mtoken',
    version=mtoken.__version__,
    description=mtoken.__description__,
    long_description=long_description,
    long_description_content_type='text/markdown',
    classifiers=classifiers,
    python_requires='>=3.8',
    platforms=['any'],
    packages=find_packages(include=['mtoken', 'mtoken.*']),
    keywords=['machine translation', 'tokenization', 'Moses', 'NLP', 'natural language processing',
              'computational linguistics'],
    entry_points={
        'console_scripts': [
            'mtokenize=mtoken.mtokenize:main',
        ],
    },
    install_requires=[
        'regex>=2021.8.3',
    ],
    extras_require={
        'test': ['pytest'],
    },
    package_data={'mtoken': ['data/nonbreaking_prefix.*']},
    include_package_data=True,
    zip_safe=False,
)
