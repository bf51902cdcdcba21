from setuptools import find_packages, setup

setup(
    name="sketchtune",
    version="0.1.0-alpha",
    description="Sketch generation and schedule mutation for tensor program auto-tuning",
    packages=find_packages("src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=["numpy", "networkx", "tabulate", "tqdm"],
    extras_require={"test": ["pytest"]},
)
