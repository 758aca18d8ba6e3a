#!/usr/bin/env python

from setuptools import setup, find_packages

requirements = open("requirements.txt")

setup(
    name='fieldsweep',
    version='0.1',
    description='Field dependency cleanup and recalculation engine for MongoDB backed tables.',
    packages=find_packages("src"),
    include_package_data=True,
    package_dir={ '': 'src'},
    install_requires=[req.strip() for req in requirements if req.strip()],
    extras_require={
        'test': ['mongomock', 'mock', 'pytest'],
    },
)
