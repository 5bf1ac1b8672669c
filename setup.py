from setuptools import setup, find_packages
import os

# Function to read the requirements.txt file
def parse_requirements(filename="requirements.txt"):
    """Load requirements from a pip requirements file."""
    try:
        with open(os.path.join(os.path.dirname(__file__), filename), 'r') as f:
            return [line.strip() for line in f if line.strip() and not line.startswith('#')]
    except IOError:
        print("Warning: requirements.txt not found. Using the core dependency set.")
        return [
            "numpy",
            "pandas",
            "PyYAML",
        ]

# Read long description from README.md if it exists
try:
    with open(os.path.join(os.path.dirname(__file__), 'README.md'), encoding='utf-8') as f:
        long_description = f.read()
except FileNotFoundError:
    long_description = 'Batch synthetic glucose-trajectory simulation and glycemic variability metrics.'

setup(
    name="aegissim",
    version="1.0.0",
    author="AegisSim Team",
    description="Synthetic batch glucose-trajectory simulator with glycemic variability metrics",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(where=".", include=['AegisSim', 'AegisSim.*']),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Healthcare Industry",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.8",
    install_requires=parse_requirements(),
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=22.0.0",
            "flake8>=5.0.0",
            "mypy>=1.0.0",
        ],
    },
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'aegissim-batch=AegisSim.cli:main',
        ],
    },
    keywords=[
        "diabetes",
        "glucose simulation",
        "synthetic data",
        "continuous glucose monitoring",
        "time in range",
        "glycemic variability",
    ],
)
