from setuptools import setup, find_packages

setup(
    name="ghddl_data",
    version="0.1.0",
    description="Downloads the datasets and embeddings used by the deep learning workshop exercises.",
    packages=find_packages(include=["ghddl_data", "ghddl_data.*"]),
    py_modules=["fetch_data"],
    install_requires=[
        "numpy",
        "pyyaml",
        "tqdm",
        "pydantic>=2",
        "requests",
        "urllib3",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'fetch-data=fetch_data:main',
        ],
    },
    python_requires='>=3.10',
)
