# Every module under otpsentinel must import cleanly, carry a docstring and
# export only names it defines.

import importlib
import pkgutil
from importlib import resources

import otpsentinel


def _modules() -> list[str]:
    prefix = otpsentinel.__name__ + "."
    return [info.name for info in pkgutil.walk_packages(otpsentinel.__path__, prefix)]


def test_modules_documented_and_exports_resolve() -> None:
    names = _modules()
    assert "otpsentinel.detect.otp" in names
    assert "otpsentinel.clipboard.secure" in names
    for name in names:
        module = importlib.import_module(name)
        assert module.__doc__ and module.__doc__.strip(), f"{name} has no docstring"
        for export in getattr(module, "__all__", ()):
            assert hasattr(module, export), f"{name}.__all__ lists missing {export}"


def test_defaults_are_packaged() -> None:
    assert resources.files("otpsentinel.config").joinpath("defaults.yml").is_file()


def test_console_script_target() -> None:
    from otpsentinel.cli import app

    assert app.info.name == "otpsentinel"
