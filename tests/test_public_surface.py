"""Test public API surface - ensure imports work correctly and no side effects."""

import types


def test_package_exports():
    """Test that analyticdefs exports the hooks, the API functions and the models."""
    import analyticdefs

    for name in analyticdefs.__all__:
        assert hasattr(analyticdefs, name), name
    assert isinstance(analyticdefs.__version__, str)


def test_api_exports_core_functions():
    """Test that analyticdefs.api exports plain callables."""
    from analyticdefs.api import deploy_definition, fetch_definition, roundtrip_definition, validate_changes

    for func in (fetch_definition, deploy_definition, validate_changes, roundtrip_definition):
        assert isinstance(func, types.FunctionType)


def test_kernel_does_not_import_outer_layers():
    """Kernel modules depend on nothing above them."""
    from pathlib import Path
    import analyticdefs

    kernel_dir = Path(analyticdefs.__file__).parent / "kernel"
    forbidden = ("analyticdefs.api", "analyticdefs.cli", "analyticdefs.analytics", "analyticdefs.validators")
    for path in kernel_dir.glob("*.py"):
        content = path.read_text(encoding="utf-8")
        for module in forbidden:
            assert module not in content, f"{path.name} imports {module}"
        assert "sys.path" not in content, f"{path.name} manipulates sys.path"
