from setuptools import setup, find_packages

setup(
    name="triggerscale",
    version="0.1.0",
    description="Trigger-driven autoscaling decision engine with scale-to-zero and cooldown.",
    packages=find_packages(include=["triggerscale", "triggerscale.*"]),
    python_requires=">=3.10",
    install_requires=[
        "aiokafka==0.12.0",
        "async-timeout==5.0.1",
        "python-dotenv==1.0.1",
        "PyYAML==6.0.2",
    ],
    extras_require={
        "test": [
            "pytest==8.3.4",
            "pytest-asyncio==0.25.3",
        ],
    },
)
