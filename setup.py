"""
HPA external metrics cache setup
"""
from setuptools import setup, find_packages

setup(
    name="hpa-external-metrics-cache",
    version="1.0.0",
    description="Freshness-bounded cache of external metric values for autoscaling policies",
    author="HPA External Metrics Cache Team",
    author_email="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "loguru>=0.7",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
)
