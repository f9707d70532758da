#!/usr/bin/env python

from setuptools import setup

setup(
    name='cast2gif',
    version='0.1.0',
    description='Render asciinema recordings as GIF, PNG or SVG animations',
    long_description='A command line tool written in Python which renders '
                     'asciinema .cast files as animated GIF, animated PNG '
                     'or SVG images.',
    url='https://github.com/katharostech/cast2gif',
    classifiers=[
        'Environment :: Console',
        'Intended Audience :: Developers',
        'Operating System :: MacOS',
        'Operating System :: POSIX :: BSD',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Multimedia :: Graphics :: Graphics Conversion',
        'Topic :: Terminals'
    ],
    python_requires='>=3.8',
    packages=[
        'cast2gif',
        'cast2gif.tests'
    ],
    scripts=['scripts/cast2gif'],
    include_package_data=True,
    install_requires=[
        'lxml',
        'Pillow>=9.2',
        'pyte',
        'rich>=12',
        'wcwidth',
    ],
    extras_require={
        'dev': [
            'coverage',
            'pylint',
            'twine',
            'wheel',
        ]
    }
)
