from pathlib import Path

from setuptools import setup, find_packages

readme = Path(__file__).parent / "README.md"

setup(
    name="worktime",
    version="0.1.0",
    packages=find_packages("src"),
    package_dir={"": "src"},
    install_requires=[
        "fastapi>=0.100.0",
        "uvicorn>=0.15.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=0.19.0",
        "aiosqlite>=0.19.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",
        ],
    },
    python_requires=">=3.9",
    author="Christo Strydom",
    author_email="christo.strydom@gmail.com",
    description="Salary and working-time submission service",
    long_description=readme.read_text() if readme.exists() else "",
    long_description_content_type="text/markdown",
    entry_points={
        "console_scripts": [
            "worktime-api=worktime.services.workings.main:run",
        ],
    },
)
