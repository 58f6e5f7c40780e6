import os
import sys
import setuptools
from setuptools.command.install import install

# The version of this package
VERSION = "0.1.0"


class VerifyVersionCommand(install):
    """
    Custom command to verify that the git tag matches the package version.
    Source: https://circleci.com/blog/continuously-deploying-python-packages-to-pypi-with-circleci/
    """

    description = "verify that the git tag matches the package version"

    def run(self):
        tag = os.getenv("CIRCLE_TAG")

        if tag != VERSION:
            info = f"Git tag: {tag} does not match the version of this package: {VERSION}"
            sys.exit(info)


with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="typed-store",
    version=VERSION,
    description="Serializable map of values of any type, retrievable as their original types",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(include=["typed_store", "typed_store.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=["pydantic>=2.0", "pydantic-core>=2.0", "loguru>=0.5.1"],
    extras_require={
        "yaml": ["PyYAML>=5.4"],
        "ml": ["numpy>=1.15.4"],
        "test": ["pytest>=6.0", "PyYAML>=5.4", "numpy>=1.15.4"],
    },
    cmdclass={"verify": VerifyVersionCommand},
)
