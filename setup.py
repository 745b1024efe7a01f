from setuptools import setup, find_packages
from pathlib import Path

setup(
    name="caption_editor",
    version=Path("./caption_editor/VERSION").read_text().strip(),
    packages=find_packages(include=["caption_editor", "caption_editor.*"]),
    package_data={"caption_editor": ["VERSION"]},
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "opencv-python-headless",
        "easydict",
        "Pillow>=10.1",
        "requests",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["caption-editor=caption_editor.cli:main"],
    },
)
