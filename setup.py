#!/usr/bin/env python
import os

from setuptools import setup

here = os.path.abspath(os.path.dirname(__file__))


def read_requirements(filename="requirements.txt"):
    import ssl

    requires = []

    # Workaround for python3.9 on macOS which is compiled with LibreSSL
    # See https://github.com/urllib3/urllib3/issues/3020
    if filename == "requirements.txt" and not ssl.OPENSSL_VERSION.startswith(
        "OpenSSL "
    ):
        requires.append("urllib3<2.0.0")

    with open(os.path.join(here, filename)) as fp:
        requires.extend(
            [row.strip() for row in fp if row.strip() and not row.startswith("#")]
        )

    return requires


about = {}
with open(os.path.join(here, "segment_stream", "__init__.py"), "r") as f:
    exec(f.read(), about)


def readme():
    with open(os.path.join(here, "README.md")) as f:
        return f.read()


setup(
    name="segment_stream",
    version=about["VERSION"],
    description="Read a numbered series of segment files as one seekable stream",
    long_description=readme(),
    long_description_content_type="text/markdown",
    license="BSD",
    python_requires=">=3.8",
    packages=["segment_stream"],
    install_requires=read_requirements(),
    extras_require={"test": read_requirements("requirements-dev.txt")},
)
