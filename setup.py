from setuptools import setup, find_packages
import re

# Read version from kepayroll/__init__.py
with open('kepayroll/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='ke-payroll',
    version=version,
    packages=find_packages(include=['kepayroll', 'kepayroll.*']),
    package_data={
        'kepayroll': ['tax-rules/*.yaml'],
    },
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
            'ke-payroll=kepayroll.cli.__main__:main',
        ],
    },
    author='Personal',
    description='Kenyan payroll calculations: PAYE, NSSF, SHIF and Housing Levy.',
    python_requires='>=3.10',
)
