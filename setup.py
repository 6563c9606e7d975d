from pathlib import Path

from setuptools import find_namespace_packages, setup

ROOT = Path(__file__).parent

# Read requirements (ignore comments and recursive -r entries)
req_path = ROOT / "requirements.txt"
requirements = []
if req_path.exists():
    for line in req_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("-r"):
            continue
        requirements.append(line)

readme = (ROOT / "README.md").read_text(encoding="utf-8") if (ROOT / "README.md").exists() else ""

setup(
    name="garden-tracker",
    version="1.0.0",
    description="Garden Tracker backend: areas, plants, growth logs, events and care reminders",
    long_description=readme,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=("app", "app.*", "infrastructure", "infrastructure.*")),
    py_modules=["garden_app"],
    python_requires=">=3.10,<4",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-flask>=1.2.0",
            "pytest-cov>=4.1.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Framework :: Flask",
        "Topic :: Home Automation",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    keywords="garden plants reminders flask socketio plantnet",
    entry_points={
        "console_scripts": [
            "garden-backend=garden_app:main",
            "garden-scheduler=app.workers.scheduler_cli:main",
            "garden-seed=app.workers.seed_cli:main",
        ]
    },
)
