from setuptools import setup, find_packages
setup(
    name='fetchyourkeys',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    include_package_data=True,
    description='Client for FetchYourKeys with an encrypted, API-key-scoped offline cache.',
    python_requires='>=3.9',
    install_requires=[
        'invoke>=2.0.0',
        'pyyaml>=6.0',
        'requests>=2.25.0',
        'pydantic>=2.0.0',
        'cryptography>=41.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'fyk = fetchyourkeys.tasks:program.run',
        ],
    },
)
