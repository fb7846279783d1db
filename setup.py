"""
Setup configuration for the OverWatch SES CDK Python application.

This package provides Infrastructure as Code (IaC) using AWS CDK Python
for monitoring an Amazon SES sending account with CloudWatch and EventBridge.
"""

import setuptools

with open("README.md", encoding="utf-8") as fp:
    long_description = fp.read()


# Read requirements from requirements.txt
def parse_requirements():
    """Parse requirements.txt file and return list of requirements."""
    requirements = []
    try:
        with open("requirements.txt", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#"):
                    requirements.append(line)
    except FileNotFoundError:
        # Fallback to hardcoded requirements if file not found
        requirements = [
            "aws-cdk-lib>=2.140.0,<3.0.0",
            "constructs>=10.0.0,<11.0.0",
            "cdk-nag>=2.28.0,<3.0.0",
        ]
    return requirements


setuptools.setup(
    name="overwatch-ses",
    version="1.0.0",
    description="CDK Python application for Amazon SES reputation monitoring",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="OverWatch Team",
    packages=setuptools.find_packages(exclude=["tests*"]),
    py_modules=["app"],
    install_requires=parse_requirements(),
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Communications :: Email",
        "Topic :: System :: Monitoring",
        "Topic :: System :: Systems Administration",
    ],
    keywords=[
        "aws",
        "cdk",
        "ses",
        "cloudwatch",
        "eventbridge",
        "alarms",
        "monitoring",
        "infrastructure",
    ],
    entry_points={
        "console_scripts": [
            "overwatch-ses-synth=app:main",
        ],
    },
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
