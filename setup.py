import pathlib
from setuptools import setup, find_packages

# The directory containing this file
HERE = pathlib.Path(__file__).parent

# The text of the README file
README = (HERE / "README.md").read_text()

# This call to setup() does all the work. OpenSim itself is distributed through conda (opensim-org::opensim), so
# it is not listed here.
setup(
    name="autoplace",
    version="0.1",
    description="Automated marker and prosthetic socket joint placement for OpenSim walking models",
    long_description=README,
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
    ],
    packages=find_packages(exclude=("tests",)),
    include_package_data=True,
    install_requires=["nimblephysics", "numpy"],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "autoplace=autoplace.main:main",
        ]
    },
)
