from tinify_optimizer.bootstrap.components import Components
from tinify_optimizer.components.configuration.configuration_interface import (
    ConfigurationInterface,
)
from tinify_optimizer.components.logger.logger_interface import LoggerInterface
from tinify_optimizer.repositories.credential_repository.credential_repository_interface import (
    CredentialRepositoryInterface,
)
from tinify_optimizer.repositories.credential_repository.json_file_credential_repository import (
    JsonFileCredentialRepository,
)

DEFAULT_SESSION_DIR = "~/.tinify"


def get_credential_repository(components: Components) -> CredentialRepositoryInterface:
    configuration = components.get_component(ConfigurationInterface)
    session_dir = configuration.get_configuration(
        "TINIFY_SESSION_DIR", str, default=DEFAULT_SESSION_DIR
    )
    return JsonFileCredentialRepository(
        session_dir=session_dir,
        logger=components.get_component(LoggerInterface).get_logger(
            "CredentialRepository"
        ),
    )
