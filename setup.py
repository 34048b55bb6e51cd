"""
ReportBuilder - standalone HTML export for report templates
"""
from setuptools import find_packages, setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="reportbuilder",
    version="0.1.0",
    author="Anthrasite",
    author_email="team@anthrasite.com",
    description="Compile report templates into self-contained, print-ready HTML documents",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/anthrasite/reportbuilder",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "reportbuilder=core.cli:main",
        ],
    },
    include_package_data=True,
)
