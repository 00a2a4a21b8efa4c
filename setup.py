"""Setup for the quota-status command."""

from setuptools import setup

setup(
    name="ai-quota-status",
    version="0.1.0",
    description="Remaining quota across AI platforms, in one text report",
    python_requires=">=3.10",
    py_modules=[
        "config",
        "credentials",
        "errors",
        "formatting",
        "http_client",
        "i18n",
        "keychain",
        "main",
        "report",
        "validation",
    ],
    packages=["providers"],
    install_requires=["requests", "keyring", "pydantic>=2"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["quota-status=main:main"]},
)
