from setuptools import setup, find_packages


with open('requirements.txt') as f:
    requirements = f.read().splitlines()

setup(
    name='colormorph',
    version='0.1.0',
    description='A command-line tool to transfer color distributions between images using sliced optimal transport',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    install_requires=requirements,
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'colormorph = colormorph.cli:main',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
