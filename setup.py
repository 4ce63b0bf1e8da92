from pathlib import Path

from setuptools import find_namespace_packages, setup

# Load packages from requirements.txt
BASE_DIR = Path(__file__).parent
with open(Path(BASE_DIR, "requirements.txt")) as file:
    required_packages = [ln.strip() for ln in file.readlines() if ln.strip()]

# Define our package
setup(
    name="LearnPath",
    version="0.1",
    description="Topic overview, placement quiz and personalised learning path generation over Azure OpenAI",
    python_requires=">=3.10",
    packages=find_namespace_packages(include=["learnpath", "learnpath.*"]),
    install_requires=required_packages,
    extras_require={
        "dev": ["pytest>=7.0", "httpx>=0.24"],
    },
    entry_points={
        "console_scripts": ["learnpath=learnpath.run:main"],
    },
)
