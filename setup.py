"""Setup script for salvage."""
import pathlib
import re

from setuptools import setup, find_packages  # type: ignore

here = pathlib.Path(__file__).parent
# salvage/__init__.py imports the package's dependencies, so read the version
# instead of importing it.
version = re.search(
    r"^version = '([^']+)'",
    (here / 'salvage' / '__init__.py').read_text(),
    re.MULTILINE,
).group(1)

setup(
    name='salvage',
    version=version,
    description='Parser combinators that recover from syntax errors',  # noqa
    long_description=(here / 'README.md').read_text(),
    long_description_content_type='text/markdown',
    license='MIT',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Topic :: Software Development :: Compilers',
        'Topic :: Text Processing :: General',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.12',
    ],
    keywords='parser combinators error-recovery',
    packages=find_packages(),  # type: ignore
    python_requires='>=3.12',
    install_requires=[
        'parsy>=2.0,<3',
        'typing-extensions>=4',
    ],
    extras_require={
        'test': [
            'coverage>=7',
            'hypothesis>=6',
            'pytest>=7',
        ],
        'dev': ['mypy>=1.1.1', 'pre-commit>=2.6.0'],
    },
)
