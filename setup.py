#encoding="utf-8"
import setuptools

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    name="PyAsap2Model",
    version="0.1.0",
    author="Sgnes",
    author_email="sgnes0514@gmai.com",
    description="Read and write ASAP2 A2L files through a typed document model",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/sgnes/A2l-Parser",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=[

      ],
    extras_require={
        "test": ["pytest"],
    },
    package_dir={"": "src"},
    packages=[
        'asap2'
        ],

    python_requires='>=3.10',
)
