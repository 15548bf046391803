from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="persistent-collections",
    version="0.1.0",
    description="Persistent (immutable) ordered sets and maps with logarithmic updates and structural sharing.",
    packages=["persistent_collections", "persistent_collections._src"],
    python_requires=">=3.9",
    extras_require={
        "test": ["pytest"],
    },
    long_description = long_description,
    long_description_content_type = "text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3.9",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
