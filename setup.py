from setuptools import setup, find_packages
import re

# Read version from __init__.py
with open("uigen/__init__.py", encoding="utf-8") as f:
    content = f.read()
    version_match = re.search(r"__version__\s*=\s*['\"]([^'\"]+)['\"]", content)
    if not version_match:
        raise RuntimeError("Unable to find version string in uigen/__init__.py")
    version = version_match.group(1)

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="uigen",
    version=version,
    description="Queue-driven generation of validated xFrame5 screens (XML layout and JavaScript handlers) with pluggable LLM backends.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["uigen", "uigen.*"]),
    package_data={"uigen": ["infrastructure/validation/allowlist.yml"]},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "psycopg2-binary>=2.9.5",
        "sqlalchemy>=2.0.4,<2.1.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "openai>=1.57.4,<2.0.0",
        "groq>=0.13.1,<1.0.0",
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "local": ["llama-cpp-python>=0.2.0"],
        "test": ["pytest>=7.0", "httpx>=0.23.0"],
    },
    entry_points={
        "console_scripts": [
            "uigen=uigen.cli.main:cli",
        ],
    },
)
