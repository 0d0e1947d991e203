from tinify_optimizer.dependencies.components import get_components
from tinify_optimizer.dependencies.services import get_optimize_service
from tinify_optimizer.services.OptimizeService.optimize_service_interface import (
    OptimizeServiceInterface,
)


def bootstrap_optimizer(
    env: str = "development",
    config_path: str = "configuration",
) -> OptimizeServiceInterface:
    components = get_components(env=env, config_path=config_path)
    return get_optimize_service(components)
