"""
Setup script for html2pdf-service.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="html2pdf-service",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.29",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "playwright>=1.40",
        "psutil>=5.9",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.25",
        ],
    },
    entry_points={
        "console_scripts": [
            "html2pdf-service=html2pdf_service.__main__:main",
        ],
    },
)
