import importlib
import pkgutil

from fastapi import APIRouter, FastAPI
from loguru import logger


def discover_routers(package_name: str = "app.api") -> list[APIRouter]:
    """
    Find the module-level `router` of every module in a package.

    Args:
        package_name: The package to scan for routers.

    Returns:
        The routers, in module name order.
    """
    package = importlib.import_module(package_name)
    package_path = getattr(package, "__path__", None)
    if not package_path:
        logger.warning(f"Cannot scan {package_name} for routers as it's not a package")
        return []

    routers: list[APIRouter] = []
    for module_info in sorted(pkgutil.iter_modules(package_path), key=lambda m: m.name):
        if module_info.ispkg:
            continue

        full_module_name = f"{package_name}.{module_info.name}"
        module = importlib.import_module(full_module_name)
        router = getattr(module, "router", None)
        if not isinstance(router, APIRouter):
            continue

        routers.append(router)
        logger.info(f"Discovered router in {full_module_name}")

    return routers


def register_routers(app: FastAPI, prefix: str = "/api") -> None:
    for router in discover_routers():
        app.include_router(router, prefix=prefix)
