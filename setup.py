import setuptools
from pathlib import Path

ROOT = Path(__file__).parent


def read_requirements(filename: str = "requirements.txt") -> list[str]:
    req_path = ROOT / filename
    if not req_path.exists():
        return []
    reqs: list[str] = []
    for line in req_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        reqs.append(line)
    return reqs


long_description = (ROOT / "README_PYPI.md").read_text(encoding="utf-8")

setuptools.setup(
    name="trigrad",
    version="0.1.0",
    description=(
        "trigrad is a small reverse-mode automatic differentiation engine for "
        "scalars and N-dimensional tensors, with a NumPy reference backend, "
        "a ctypes-accelerated native backend and an asynchronous wgpu backend."
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="Apache-2.0",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=read_requirements(),
    extras_require={"test": ["pytest", "python-dotenv"]},
    include_package_data=True,
    zip_safe=False,
    package_data={
        "trigrad": [
            "infrastructure/native/python/*.so",
            "infrastructure/native/python/*.dylib",
            "infrastructure/native/python/*.dll",
            "infrastructure/native/src/*.c",
        ],
    },
)
