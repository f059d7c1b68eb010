from setuptools import setup, find_packages

VERSION = '0.1.0'
DESCRIPTION = 'A CLI tool for harvesting stories from a catalog API'
LONG_DESCRIPTION = 'Sequentially downloads story metadata and chapter text from a story catalog JSON API into a directory tree.'

# Read from requirements.txt, but filter out comments and empty lines
try:
    with open('requirements.txt', encoding='utf-8') as f:
        install_requires = [line.strip() for line in f if line.strip() and not line.startswith('#')]
except FileNotFoundError:
    install_requires = ['requests', 'beautifulsoup4', 'click']

setup(
    name='novel-harvester',
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    packages=find_packages(include=['novel_harvester', 'novel_harvester.*']),
    install_requires=install_requires,
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'harvester = novel_harvester.cli.main:harvester',
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: End Users/Desktop',
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'Topic :: Utilities',
    ],
    python_requires='>=3.8',
)
