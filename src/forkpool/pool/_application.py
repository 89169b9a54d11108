"""Loading of the host application's boot file."""

import importlib.util
import sys
from pathlib import Path
from types import ModuleType

from forkpool.exceptions import ApplicationLoadError

APPLICATION_MODULE_NAME = "forkpool_application"


def resolve_app_path(path: Path, *, root: Path | None = None) -> Path:
    """Resolve the boot file path against the application root.

    Args:
        path: Boot file path, absolute or relative to ``root``.
        root: Application root. Defaults to the working directory.

    Returns:
        Absolute path of the boot file.
    """
    if path.is_absolute():
        return path
    return (root or Path.cwd()) / path


def load_application(path: Path, *, root: Path | None = None) -> ModuleType:
    """Execute the host application's boot file as a module.

    The application root is put on ``sys.path`` first so the boot file can
    import the application's own packages, and so can the payload later.

    Args:
        path: Boot file path, absolute or relative to ``root``.
        root: Application root. Defaults to the working directory.

    Returns:
        The executed module.

    Raises:
        ApplicationLoadError: If the boot file is missing or raises while
            executing.
    """
    app_root = root or Path.cwd()
    boot_file = resolve_app_path(path, root=app_root)
    if not boot_file.is_file():
        msg = (
            f"Could not find application initialization file {boot_file}. "
            "Make sure forkpool is run from the application root directory."
        )
        raise ApplicationLoadError(msg, path=boot_file)

    if str(app_root) not in sys.path:
        sys.path.insert(0, str(app_root))

    spec = importlib.util.spec_from_file_location(APPLICATION_MODULE_NAME, boot_file)
    if spec is None or spec.loader is None:
        msg = f"Could not load application initialization file {boot_file}"
        raise ApplicationLoadError(msg, path=boot_file)

    module = importlib.util.module_from_spec(spec)
    sys.modules[APPLICATION_MODULE_NAME] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        _ = sys.modules.pop(APPLICATION_MODULE_NAME, None)
        msg = f"Error while loading application from {boot_file}: {e}"
        raise ApplicationLoadError(msg, path=boot_file, cause=e) from e

    return module
