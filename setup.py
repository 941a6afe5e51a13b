from setuptools import setup

# ALL DECLARATIVE SETUP GOES IN THE pyproject.toml
setup()
