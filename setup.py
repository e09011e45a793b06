"""Setup configuration for Warncord."""

from setuptools import setup, find_packages

setup(
    name="warncord",
    version="0.0.1",
    description="Automated escalation of AI-flagged Discord messages into violations",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord",
        "aiosqlite",
        "PyYAML",
        "python-dotenv",
        "prompt_toolkit",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "warncord=warncord.main:main",
        ],
    },
)
