from setuptools import find_packages, setup

setup(
    name="dirwatcher",
    version="0.1.0",
    description="Watches a directory and reports created, removed and moved top-level folders",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click",
        "toml",
        "pyyaml",
        "python-daemon",
        "rich",
        "psutil",
        "watchdog",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "dirwatcher=dirwatcher.cli:main"
        ]
    },
)
