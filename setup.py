"""Setup for aiobeefmote."""
from pathlib import Path

from setuptools import find_packages, setup

PROJECT_DIR = Path(__file__).parent.resolve()
README_FILE = PROJECT_DIR / "README.md"
REQUIREMENTS_FILE = PROJECT_DIR / "requirements.txt"
PACKAGES = find_packages(exclude=["tests", "tests.*"])
PROJECT_REQ_PYTHON_VERSION = "3.11"

setup(
    name="aiobeefmote",
    version="0.1.0",
    license="GPL-3.0-or-later",
    url="https://github.com/lgvaioli/beefmote",
    author="Laureano G. Vaioli",
    author_email="laureano3400@gmail.com",
    description="Remote control server for media players, speaking a line based text protocol.",
    long_description=README_FILE.read_text(encoding="utf-8"),
    long_description_content_type="text/markdown",
    packages=PACKAGES,
    zip_safe=True,
    platforms="any",
    install_requires=REQUIREMENTS_FILE.read_text(encoding="utf-8").splitlines(),
    extras_require={"test": ["pytest"]},
    python_requires=f">={PROJECT_REQ_PYTHON_VERSION}",
    classifiers=[
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Sound/Audio :: Players",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
