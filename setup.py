from setuptools import setup, find_packages

setup(
    name="storemap",
    version="1.0.0",
    description="Store layout backend serving nested sector maps, products and checkout queues",
    packages=find_packages(include=["storemap", "storemap.*"]),
    python_requires=">=3.9",
    install_requires=[
        "Flask>=3.0.0",
        "Flask-SQLAlchemy>=3.1.0",
        "Flask-Migrate>=4.0.0",
        "Flask-Login>=0.6.3",
        "SQLAlchemy>=2.0.0",
        "Werkzeug>=3.0.0",
        "redis>=5.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
        "dev": [
            "pytest>=7.4.0",
            "black>=23.0.0",
            "pylint>=2.17.0",
        ],
    },
)
