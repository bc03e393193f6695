from setuptools import setup, find_packages

# Read the contents of your README file
from pathlib import Path
this_directory = Path(__file__).parent
long_description = (this_directory / "kohonen_map/README.md").read_text() # Use the library's README

setup(
    name='kohonen-map',
    version='0.1.0', # Corresponds to __version__ in __init__.py
    description='Kohonen self-organizing map training (iterative and batch) on PyTorch.',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=find_packages(where=".", include=['kohonen_map', 'kohonen_map.*']),
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Operating System :: OS Independent',
        'Topic :: Scientific/Engineering :: Artificial Intelligence',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
    python_requires='>=3.10', # PEP 604 unions in annotations
    install_requires=[
        'torch>=2.0',
    ],
    extras_require={
        'test': ['pytest'],
    },
    keywords='som, self-organizing map, kohonen map, batch som, pytorch, machine learning',
)
