import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    if not os.path.exists(README):
        return ""
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="schema_to_fields",
    version="1.0.1",
    description="Resolve OpenAPI / JSON Schema documents into a language-agnostic field model for code generation",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Intended Audience :: Developers",
    ],
    keywords="openapi json schema ref resolution code generation field model",
    license="MIT",
    packages=find_packages(),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "schema_to_fields=schema_to_fields.schema_to_fields:schema_to_fields",
        ],
    },
    include_package_data=True,
    package_data={
        "schema_to_fields": ["tests/test_data/**/*.json", "tests/test_data/**/*.yaml"],
    },
    zip_safe=False,
)
