from setuptools import setup, find_packages
import re

# Read version from autax/__init__.py
with open('autax/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='au-tax-engine',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'autax': ['tax-rules/*.yaml'],
    },
    include_package_data=True,
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'autax=autax.cli.__main__:main',
        ],
    },
    author='Personal',
    description='Australian income tax, PAYG withholding and superannuation calculators.',
    python_requires='>=3.10',
)
