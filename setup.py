from setuptools import find_packages, setup

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name='token-wizard',
    packages=find_packages(include=['token_wizard']),
    version='0.1.0',
    description='ERC-20 token source generator, flattener and compiler front end',
    long_description=long_description,
    long_description_content_type="text/markdown",
    author='SBIP',
    license='MIT',
    install_requires=['addict>=2.4.0',
                      'py_solc_x>=1.1.1',
                      'semantic_version>=2.9.0',
                      'pycryptodome>=3.16.0',
                      'eth-utils>=2.0.0,<4'],
    extras_require={'test': ['pytest>=4.4.1']},
    entry_points={'console_scripts': ['token-wizard=token_wizard.cli:main']},
    test_suite='tests',
)
