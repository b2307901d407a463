# -*- coding: utf-8 -*-
#
# This file were created by Python Boilerplate. Use boilerplate to start simple
# usable and best-practices compliant Python projects.
#
# Learn more about it at: http://github.com/fabiommendes/python-boilerplate/
#

import os
import codecs
from setuptools import setup, find_packages

# Save version and author to __meta__.py
dirname = os.path.dirname(os.path.abspath(__file__))
version = open(os.path.join(dirname, 'VERSION')).read().strip()
path = os.path.join(dirname, 'src', 'bookcheck', '__meta__.py')
meta = '''# Automatically created. Please do not edit.
__version__ = u'%s'
__author__ = u'F\\xe1bio Mac\\xeado Mendes'
''' % version
with open(path, 'w') as F:
    F.write(meta)

setup(
    # Basic info
    name='bookcheck',
    version=version,
    author='Fábio Macêdo Mendes',
    author_email='fabiomacedomendes@gmail.com',
    url='http://github.com/fabiommendes/bookcheck',
    description='Checks the Python and Ruby code snippets of Markdown '
                'chapters.',
    long_description=codecs.open(os.path.join(dirname, 'README.rst'),
                                 'rb', 'utf8').read(),

    # Classifiers (see https://pypi.python.org/pypi?%3Aaction=list_classifiers)
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU General Public License (GPL)',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Documentation',
        'Topic :: Software Development :: Quality Assurance',
    ],

    # Packages and dependencies
    package_dir={'': 'src'},
    packages=find_packages('src'),
    install_requires=[
        'lazyutils',
    ],
    extras_require={
        'dev': [
            'pytest',
        ],
    },

    # Scripts
    entry_points={
       'console_scripts': ['bookcheck = bookcheck.__main__:main'],
    },

    # Other configurations
    zip_safe=False,
    platforms='any',
)
