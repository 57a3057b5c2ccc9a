from setuptools import setup, find_packages

# Load version from vcfStatsUtils/_version.py
version = {}
with open("vcfStatsUtils/_version.py") as fp:
    exec(fp.read(), version)

setup(
    name='vcfStatsUtils',
    version=version['__version__'],  # Use dynamic version loading
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'numpy>=1.21.0',
        'pandas>=1.3.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'vcfStatsUtils = vcfStatsUtils.__main__:main',
        ],
    },
    description='Merge and summarize bcftools stats reports with section-aware arithmetic',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    classifiers=[
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Operating System :: OS Independent',
        'License :: OSI Approved :: MIT License',
    ],
    include_package_data=True,
    python_requires='>=3.10',
)
