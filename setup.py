"""
Setup file.
"""

from pathlib import Path

from setuptools import find_packages, setup

URL = "https://github.com/zackees/build-timestamper"
KEYWORDS = "build log timestamps console annotation"
HERE = Path(__file__).parent


if __name__ == "__main__":
    setup(
        name="build-timestamper",
        version="1.0.0",
        description="Readable elapsed or wall-clock timestamps for marked-up build logs.",
        maintainer="Zachary Vorhies",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=["psutil"],
        extras_require={"test": ["pytest"]},
        entry_points={"console_scripts": ["build-timestamper=build_timestamper.cli:main"]},
    )
