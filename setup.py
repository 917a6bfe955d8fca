from setuptools import setup, find_packages

setup(
    name="warehouse-pipeline",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "boto3>=1.26.0",
        "botocore>=1.29.0",
        "pandas>=1.5.0",
        "psycopg2-binary>=2.9.5",
        "sqlalchemy>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "warehouse-pipeline=warehouse_pipeline.cli:run",
        ],
    },
    python_requires=">=3.8",
    description="Export PostgreSQL tables to S3 and restore them into Redshift",
    keywords="s3, postgresql, redshift, pipeline, warehouse",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
