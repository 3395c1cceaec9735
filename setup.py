from setuptools import setup, find_packages

setup(
    name="npk-deploy",
    version="3.0.0",
    description="Preflight validation and deployment control plane for NPK",
    packages=find_packages(include=["npk_deploy", "npk_deploy.*"]),
    include_package_data=True,
    package_data={"npk_deploy": ["data/*.json"]},
    python_requires=">=3.9",
    install_requires=[
        "boto3",
        "botocore",
        "pydantic>=2",
        "rich",
        "typer",
        "cli-core-yo>=1.0,<1.2.1",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "npk-deploy=npk_deploy.cli:main",
        ],
    },
)
