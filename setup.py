"""Setup script for icaloverview."""

from pathlib import Path

from setuptools import find_packages, setup

readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements, separating test-only dependencies
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
dev_requirements = []

if requirements_file.exists():
    in_testing_section = False
    for line in requirements_file.read_text().strip().split("\n"):
        line = line.strip()
        if line.startswith("#"):
            in_testing_section = "testing" in line.lower()
            continue
        if not line:
            continue
        if in_testing_section or "pytest" in line:
            dev_requirements.append(line)
        else:
            requirements.append(line)

setup(
    name="icaloverview",
    version="0.1.0",
    description="Combined agenda, week and month overview of several ICS calendar feeds",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["icaloverview", "icaloverview.*"]),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "test": dev_requirements,
        "dev": dev_requirements,
    },
    python_requires=">=3.11",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Web Environment",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Scheduling",
        "Framework :: AsyncIO",
        "Framework :: aiohttp",
    ],
    keywords="calendar ics icalendar agenda aggregation aiohttp async",
    entry_points={
        "console_scripts": [
            "icaloverview=icaloverview.__main__:main",
        ],
    },
    zip_safe=False,
)
