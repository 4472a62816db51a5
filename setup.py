from setuptools import find_packages, setup


setup(
    name='frugal',
    version='0.1',
    description='Approximate MAP explanations and MAP-independence tests '
                'for discrete graphical models',
    packages=find_packages(exclude=['examples']),
    python_requires='>=3.7',
    install_requires=[
        'numpy>=1.17',
        'networkx>=2.0',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
