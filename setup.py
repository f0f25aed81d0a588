#!/usr/bin/env python3
"""
Setup script for Holiday Tree Gesture Control
"""

from pathlib import Path

from setuptools import find_packages, setup

ROOT = Path(__file__).parent


def read_requirements():
    """Read runtime requirements from requirements.txt"""
    lines = (ROOT / "requirements.txt").read_text().splitlines()
    return [line.strip() for line in lines if line.strip() and not line.startswith("#")]


setup(
    name="gesture-intent",
    version="0.1.0",
    description="Webcam hand gestures that rotate, explode and twinkle a holiday tree scene",
    python_requires=">=3.9",
    packages=find_packages(include=["gesture_intent", "gesture_intent.*"]),
    package_data={"gesture_intent": ["config.default.yaml"]},
    install_requires=read_requirements(),
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "gesture-intent=gesture_intent.main:run",
        ],
    },
)
